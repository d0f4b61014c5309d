from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Union

from cart_api.config import Settings, settings as default_settings


PRICES_FORMATTED = "formatted"

Money = Union[float, str]


def format_price(value: int, settings: Optional[Settings] = None) -> str:
    """
    Render a minor-unit amount as a display string, e.g. 1999 -> "$19.99".

    Uses the configured currency symbol, position, separators and decimals.
    """
    settings = settings or default_settings
    decimals = settings.CURRENCY_MINOR_UNIT

    amount = (Decimal(int(value)) / (Decimal(10) ** decimals)).quantize(
        Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP
    )
    negative = amount < 0
    whole, _, fraction = f"{abs(amount):.{decimals}f}".partition(".")

    groups = []
    while len(whole) > 3:
        groups.insert(0, whole[-3:])
        whole = whole[:-3]
    groups.insert(0, whole)
    number = settings.CURRENCY_THOUSAND_SEPARATOR.join(groups)
    if decimals > 0:
        number = f"{number}{settings.CURRENCY_DECIMAL_SEPARATOR}{fraction}"

    symbol = settings.CURRENCY_SYMBOL
    position = settings.CURRENCY_POSITION
    if position == "right":
        formatted = f"{number}{symbol}"
    elif position == "right_space":
        formatted = f"{number} {symbol}"
    elif position == "left_space":
        formatted = f"{symbol} {number}"
    else:
        formatted = f"{symbol}{number}"

    return f"-{formatted}" if negative else formatted


def prepare_money_response(value: Any) -> int:
    """Normalize a money value to integer minor units."""
    return int(Decimal(str(value or 0)).to_integral_value(rounding=ROUND_HALF_UP))


def convert_money_response(value: Any, prices: Optional[str] = None, settings: Optional[Settings] = None) -> Money:
    """Return a money value raw (float of minor units) or formatted."""
    if prices == PRICES_FORMATTED:
        return format_price(prepare_money_response(value), settings)
    return float(prepare_money_response(value))


def convert_totals_response(
    totals: Dict[str, Any],
    prices: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Money]:
    """Convert every value of a totals mapping."""
    return {
        key: convert_money_response(value, prices, settings)
        for key, value in totals.items()
    }


def currency_response(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Currency block included in cart responses."""
    settings = settings or default_settings
    on_left = settings.CURRENCY_POSITION in ("left", "left_space")
    space = " " if settings.CURRENCY_POSITION.endswith("_space") else ""
    return {
        "currency_code": settings.CURRENCY_CODE,
        "currency_symbol": settings.CURRENCY_SYMBOL,
        "currency_minor_unit": settings.CURRENCY_MINOR_UNIT,
        "currency_decimal_separator": settings.CURRENCY_DECIMAL_SEPARATOR,
        "currency_thousand_separator": settings.CURRENCY_THOUSAND_SEPARATOR,
        "currency_prefix": settings.CURRENCY_SYMBOL + space if on_left else "",
        "currency_suffix": "" if on_left else space + settings.CURRENCY_SYMBOL,
    }
