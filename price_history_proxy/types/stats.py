from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional

from price_history_proxy.helper import DEFAULT_CURRENCY
from price_history_proxy.types.any_deal import Amount

class StatsModel(BaseModel):
    """Response models are serialized with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class HistoricalLow(StatsModel):
    price: str
    date: str
    amount: Amount
    timestamp: Optional[int] = None

class HistoricalHigh(StatsModel):
    price: str
    date: str
    amount: Amount

class LastSale(StatsModel):
    date: str
    cut: int

class ChartData(StatsModel):
    labels: list[int] = Field(default_factory=list)
    prices: list[Optional[Amount]] = Field(default_factory=list)
    currency: str = DEFAULT_CURRENCY

class ResultData(StatsModel):
    historical_low: Optional[HistoricalLow] = None
    historical_high: Optional[HistoricalHigh] = None
    last_sale: Optional[LastSale] = None
    chart_data: ChartData = Field(default_factory=ChartData)

class StatsStatus(str, Enum):
    API_ERROR = 'API_ERROR'
    NO_HISTORY = 'NO_HISTORY'

class ErrorResponse(BaseModel):
    status: StatsStatus
    message: str
