from typing import Dict, List, Optional, Sequence

import httpx
from sqlmodel import Session

from ..core.currency import Currency
from .exchange_rates import convert_amount, get_exchange_rate


def convert_to_base_currency(
    session: Session,
    amount: float,
    from_currency: Currency,
    to_currency: Currency,
    client: Optional[httpx.Client] = None,
) -> float:
    """Convert an amount from its original currency to the budget's currency."""
    if Currency(from_currency) == Currency(to_currency):
        return amount
    return convert_amount(session, amount, from_currency, to_currency, client)


def convert_amounts_to_base_currency(
    session: Session,
    items: Sequence,
    base_currency: Currency,
    client: Optional[httpx.Client] = None,
) -> List[float]:
    """Convert objects exposing ``amount`` and ``currency`` to ``base_currency``.

    Items are grouped by currency so each currency costs one rate lookup.
    The result keeps the input order.
    """
    base_currency = Currency(base_currency)
    rates: Dict[Currency, float] = {}
    converted: List[float] = []
    for item in items:
        currency = Currency(item.currency)
        if currency not in rates:
            rates[currency] = 1.0 if currency == base_currency else get_exchange_rate(
                session, currency, base_currency, client
            )
        converted.append(item.amount * rates[currency])
    return converted
