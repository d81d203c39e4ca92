import asyncio
import datetime
import logging
import math
from dataclasses import dataclass
from enum import Enum
from pydantic import ValidationError
from typing import Any, Optional

from price_history_proxy.any_deal_api import AnyDealAPI
from price_history_proxy.custom_errors import AnyDealAPIError
from price_history_proxy.helper import DEFAULT_CURRENCY, format_date, format_price, parse_timestamp, to_epoch_millis
from price_history_proxy.types.any_deal import Deal, HistoryEntry, LookupStatus, LowPrice
from price_history_proxy.types.stats import ChartData, HistoricalHigh, HistoricalLow, LastSale, ResultData

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = 'Game not found in IsThereAnyDeal.'

@dataclass
class TimedDeal:
    """A history entry with its timestamp already parsed."""
    moment: datetime.datetime
    deal: Deal

@dataclass
class HistorySummary:
    historical_high: Optional[HistoricalHigh]
    last_sale: Optional[LastSale]
    chart_data: ChartData

class StatsOutcome(Enum):
    SUCCESS = 'success'
    NO_HISTORY = 'no_history'
    UPSTREAM_FAILURE = 'upstream_failure'

@dataclass
class StatsResult:
    outcome: StatsOutcome
    data: Optional[ResultData] = None
    message: str = ''

def parse_history(raw_entries: list[Any]) -> list[TimedDeal]:
    """
    Keep the entries that have both a timestamp and a deal.

    Entries with a missing or unreadable timestamp, or a deal that is not an object, are dropped.
    Null fields inside a deal are kept as None.
    """
    parsed = []
    for raw in raw_entries:
        if not isinstance(raw, dict) or not raw.get('timestamp') or not isinstance(raw.get('deal'), dict):
            continue

        try:
            entry = HistoryEntry.model_validate(raw)
            moment = parse_timestamp(entry.timestamp)
        except (ValidationError, ValueError) as e:
            logger.debug(f"Skipping history entry {raw.get('timestamp')!r}: {e}")
            continue

        parsed.append(TimedDeal(moment=moment, deal=entry.deal))
    return parsed

def round_cut(cut: float) -> int:
    # Halves round up
    return int(math.floor(cut + 0.5))

def aggregate_history(raw_entries: list[Any], currency: str = DEFAULT_CURRENCY) -> HistorySummary:
    """
    Summarizes a deal history into its highest regular price, its latest sale and a chart series.

    Args:
        raw_entries: history entries as returned by IsThereAnyDeal, in any order
        currency: currency used to format the highest price

    Returns:
        HistorySummary, with historical_high/last_sale left as None when the history
        holds no positive regular price / no discount
    """
    # sorted() is stable, entries sharing a timestamp keep their order
    entries = sorted(parse_history(raw_entries), key=lambda item: item.moment)

    chart_data = ChartData(currency=currency)
    max_price = 0
    max_price_date = None
    last_sale_date = None
    last_sale_cut = 0.0

    for item in entries:
        deal = item.deal
        chart_data.labels.append(to_epoch_millis(item.moment))
        chart_data.prices.append(deal.price.amount if deal.price else None)

        regular = deal.regular.amount if deal.regular else None
        if regular is not None and regular > max_price:
            max_price = regular
            max_price_date = item.moment
        cut = deal.cut or 0
        if cut > 0:
            last_sale_date = item.moment
            last_sale_cut = cut

    historical_high = None
    if max_price > 0:
        historical_high = HistoricalHigh(
            price=format_price(max_price, currency),
            date=format_date(max_price_date),
            amount=max_price
        )

    last_sale = None
    if last_sale_date:
        last_sale = LastSale(date=format_date(last_sale_date, specific=True), cut=round_cut(last_sale_cut))

    return HistorySummary(historical_high=historical_high, last_sale=last_sale, chart_data=chart_data)

def build_historical_low(low: LowPrice) -> tuple[HistoricalLow, str]:
    """
    Returns the historical low for the response and the currency it is priced in.
    That currency is used for every other price of the response.
    """
    currency = low.price.currency or DEFAULT_CURRENCY

    timestamp = None
    if low.timestamp:
        try:
            timestamp = to_epoch_millis(parse_timestamp(low.timestamp))
        except ValueError as e:
            logger.warning(f"Invalid regional low timestamp {low.timestamp!r}: {e}")

    historical_low = HistoricalLow(
        price=format_price(low.price.amount, currency),
        date=format_date(low.timestamp),
        amount=low.price.amount,
        timestamp=timestamp
    )
    return historical_low, currency

class PriceStats():
    """
        Builds the price history summary of a single Steam product.
        - Resolves the IsThereAnyDeal game id
        - Fetches the regional low and the full history side by side
        - Aggregates both into a ResultData
    """

    def __init__(self, any_deal: AnyDealAPI):
        self.any_deal = any_deal

    async def fetch_historical_stats(self, shop_game_id: str) -> StatsResult:
        lookup = await self.any_deal.lookup_gid(shop_game_id)
        if lookup.status is LookupStatus.NOT_FOUND:
            return StatsResult(StatsOutcome.NO_HISTORY, message=NOT_FOUND_MESSAGE)
        if lookup.status is LookupStatus.UPSTREAM_FAILURE:
            return StatsResult(StatsOutcome.UPSTREAM_FAILURE, message=lookup.detail)

        low, history = await asyncio.gather(
            self._fetch_historical_low(lookup.gid),
            self._fetch_history(lookup.gid)
        )

        result = ResultData()
        currency = DEFAULT_CURRENCY
        if low is not None:
            result.historical_low, currency = build_historical_low(low)

        # Currency has to be settled before the history is formatted
        summary = aggregate_history(history, currency)
        result.historical_high = summary.historical_high
        result.last_sale = summary.last_sale
        result.chart_data = summary.chart_data

        logger.info(f"{shop_game_id}: {len(summary.chart_data.prices)} history points, currency {currency}")
        return StatsResult(StatsOutcome.SUCCESS, data=result)

    async def _fetch_historical_low(self, gid: str) -> Optional[LowPrice]:
        try:
            return await self.any_deal.get_historical_low(gid)
        except AnyDealAPIError as e:
            logger.warning(f"Regional low unavailable for {gid}: {e}")
            return None

    async def _fetch_history(self, gid: str) -> list[Any]:
        try:
            return await self.any_deal.get_history(gid)
        except AnyDealAPIError as e:
            logger.error(f"Error fetching full history for {gid}: {e}")
            return []
