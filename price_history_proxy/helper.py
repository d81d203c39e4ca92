import datetime
import logging
import dateutil.parser
from typing import Any, Optional, Union
from babel.dates import format_date as babel_format_date
from babel.numbers import format_currency

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = 'USD'
DISPLAY_LOCALE = 'es_AR'
UNKNOWN_DATE = 'Unknown date'

# Currencies rendered with their home locale, everything else uses en_US
CURRENCY_LOCALES = {
    'ARS': 'es_AR',
}
DEFAULT_PRICE_LOCALE = 'en_US'

MONTH_YEAR_PATTERN = 'MMM yyyy'
DAY_MONTH_YEAR_PATTERN = 'd MMM yyyy'

Timestamp = Union[int, float, str, datetime.datetime]

# Fields missing from partial dates such as "2023" or "2023-02"
PARSE_DEFAULT = datetime.datetime(1970, 1, 1)

def format_price(amount: Any, currency_code: str) -> str:
    """
    Formats an amount of money for display.

    Args:
        amount: money value, may be zero or negative
        currency_code: ISO 4217 code such as 'USD' or 'ARS'

    Returns:
        Localized currency string, or "CODE amount" if the value can't be formatted
    """
    locale = CURRENCY_LOCALES.get(currency_code, DEFAULT_PRICE_LOCALE)
    try:
        return format_currency(amount, currency_code, locale=locale)
    except Exception as e:
        logger.debug(f"Could not format {amount} {currency_code}: {e}")
        return f"{currency_code} {amount}"

def format_date(timestamp: Optional[Timestamp], specific: bool = False, locale: str = DISPLAY_LOCALE) -> str:
    """
    Formats a timestamp as "month year", or "day month year" when specific is set.

    Args:
        timestamp: epoch seconds, a parsable date string or a datetime
        specific: include the day of the month
        locale: locale used for month names

    Returns:
        Formatted date or UNKNOWN_DATE when the timestamp is missing or invalid
    """
    if not timestamp:
        return UNKNOWN_DATE

    try:
        date_obj = parse_timestamp(timestamp)
        pattern = DAY_MONTH_YEAR_PATTERN if specific else MONTH_YEAR_PATTERN
        return babel_format_date(date_obj, format=pattern, locale=locale)
    except Exception as e:
        logger.error(f"Error formatting date {timestamp!r}: {e}")
        return UNKNOWN_DATE

def parse_timestamp(value: Timestamp) -> datetime.datetime:
    """
        Converts epoch seconds, date strings and datetimes into an aware UTC datetime.
        Naive values are treated as UTC.

        Raises:
            ValueError if the value can't be read as a date
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid timestamp: {value!r}")

    if isinstance(value, datetime.datetime):
        date_obj = value
    elif isinstance(value, (int, float)):
        try:
            date_obj = datetime.datetime.fromtimestamp(value, tz=datetime.timezone.utc)
        except (OverflowError, OSError) as e:
            raise ValueError(f"Timestamp out of range: {value!r}") from e
    elif isinstance(value, str) and value.strip():
        try:
            date_obj = dateutil.parser.parse(value, default=PARSE_DEFAULT)
        except OverflowError as e:
            raise ValueError(f"Timestamp out of range: {value!r}") from e
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if date_obj.tzinfo is None:
        return date_obj.replace(tzinfo=datetime.timezone.utc)
    return date_obj.astimezone(datetime.timezone.utc)

def to_epoch_millis(date_obj: datetime.datetime) -> int:
    return round(date_obj.timestamp() * 1000)
