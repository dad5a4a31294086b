import enum
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, NamedTuple


class Currency(str, enum.Enum):
    USD = "USD"
    EUR = "EUR"
    HUF = "HUF"


class CurrencyConfig(NamedTuple):
    code: Currency
    symbol: str
    symbol_position: str  # "before" | "after"
    decimal_places: int


CURRENCIES: Dict[Currency, CurrencyConfig] = {
    Currency.USD: CurrencyConfig(Currency.USD, "$", "before", 2),
    Currency.EUR: CurrencyConfig(Currency.EUR, "€", "before", 2),
    # Forint amounts are shown without decimals
    Currency.HUF: CurrencyConfig(Currency.HUF, "Ft", "after", 0),
}


def format_currency(amount: float, currency: Currency = Currency.USD) -> str:
    """Format ``amount`` with grouping and the currency's symbol.

    >>> format_currency(1234.5)
    '$1,234.50'
    >>> format_currency(1234.5, Currency.HUF)
    '1,235 Ft'

    Halves round away from zero, not to even.
    """
    config = CURRENCIES[Currency(currency)]
    quantized = Decimal(str(amount)).quantize(Decimal(1).scaleb(-config.decimal_places), rounding=ROUND_HALF_UP)
    formatted = f"{quantized:,.{config.decimal_places}f}"
    if config.symbol_position == "before":
        return f"{config.symbol}{formatted}"
    return f"{formatted} {config.symbol}"


def currency_options() -> List[Dict[str, str]]:
    return [
        {"value": config.code.value, "label": f"{config.code.value} ({config.symbol})"}
        for config in CURRENCIES.values()
    ]
