"""
Exchange rates with a three-tier lookup: process memory, today's database
row, then the external rate API (USD based). Fetched rates are persisted so
other workers and later requests reuse them.

The memory cache is process-local and unsynchronized; a stale or duplicated
entry only costs an extra database read.
"""
import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, Mapping, NamedTuple, Optional

import httpx
from sqlmodel import Session, select

from ..config import settings
from ..core.currency import Currency
from ..models.exchange_rate import ExchangeRate


logger = logging.getLogger(__name__)

CACHE_TTL = timedelta(hours=24)
BASE_CURRENCY = Currency.USD


class ExchangeRateError(Exception):
    """Raised when the external rate API cannot provide rates."""


class CachedRate(NamedTuple):
    rate: float
    as_of: datetime


_rate_cache: Dict[str, CachedRate] = {}


def _cache_key(from_currency: Currency, to_currency: Currency) -> str:
    return f"{from_currency.value}_{to_currency.value}"


def _remember(from_currency: Currency, to_currency: Currency, rate: float, rate_date: date) -> None:
    _rate_cache[_cache_key(from_currency, to_currency)] = CachedRate(rate, datetime.combine(rate_date, time.min))


def clear_rate_cache() -> None:
    _rate_cache.clear()


def fetch_usd_rates(client: Optional[httpx.Client] = None) -> Dict[str, float]:
    """Return the API's USD based rate table, e.g. ``{"EUR": 0.92, "HUF": 355.1}``."""
    url = f"{settings.exchange_rate_api_url.rstrip('/')}/{BASE_CURRENCY.value}"
    try:
        if client is None:
            with httpx.Client(timeout=settings.exchange_rate_timeout) as own_client:
                response = own_client.get(url)
        else:
            response = client.get(url)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error fetching from exchange rate API: {e}")
        raise ExchangeRateError(f"Exchange rate API request failed: {e}") from e

    rates = data.get("rates") if isinstance(data, dict) else None
    if not isinstance(rates, dict):
        raise ExchangeRateError("Exchange rate API returned no rate table")

    usd_rates: Dict[str, float] = {}
    for currency in Currency:
        value = rates.get(currency.value)
        if value is None:
            continue
        try:
            usd_rates[currency.value] = float(value)
        except (TypeError, ValueError):
            logger.error(f"Exchange rate API returned a non-numeric rate for {currency.value}: {value!r}")
            raise ExchangeRateError(f"Invalid rate for {currency.value}: {value!r}")
    return usd_rates


def cross_rate(usd_rates: Mapping[str, float], from_currency: Currency, to_currency: Currency) -> float:
    """Convert through USD: from -> USD -> to. Missing or zero entries count as 1."""

    def _usd_rate(currency: Currency) -> float:
        value = usd_rates.get(currency.value)
        return float(value) if value else 1.0

    from_to_usd = 1.0 if from_currency == BASE_CURRENCY else 1.0 / _usd_rate(from_currency)
    usd_to_to = 1.0 if to_currency == BASE_CURRENCY else _usd_rate(to_currency)
    return from_to_usd * usd_to_to


def _store_rate(session: Session, from_currency: Currency, to_currency: Currency, rate: float, rate_date: date) -> None:
    existing = session.exec(
        select(ExchangeRate).where(
            ExchangeRate.from_currency == from_currency,
            ExchangeRate.to_currency == to_currency,
            ExchangeRate.rate_date == rate_date,
        )
    ).first()
    if existing is None:
        session.add(
            ExchangeRate(
                from_currency=from_currency,
                to_currency=to_currency,
                rate=rate,
                rate_date=rate_date,
            )
        )
    else:
        existing.rate = rate
        session.add(existing)


def _latest_stored(session: Session, from_currency: Currency, to_currency: Currency) -> Optional[ExchangeRate]:
    return session.exec(
        select(ExchangeRate)
        .where(
            ExchangeRate.from_currency == from_currency,
            ExchangeRate.to_currency == to_currency,
        )
        .order_by(ExchangeRate.rate_date.desc())
    ).first()


def _fallback_rate(session: Session, from_currency: Currency, to_currency: Currency) -> float:
    reverse = _rate_cache.get(_cache_key(to_currency, from_currency))
    if reverse is not None and reverse.rate:
        return 1.0 / reverse.rate

    stored = _latest_stored(session, from_currency, to_currency)
    if stored is not None:
        logger.warning(
            f"Using stale exchange rate {from_currency.value} -> {to_currency.value} from {stored.rate_date}"
        )
        return stored.rate

    stored_reverse = _latest_stored(session, to_currency, from_currency)
    if stored_reverse is not None and stored_reverse.rate:
        logger.warning(
            f"Using stale inverse exchange rate {to_currency.value} -> {from_currency.value} "
            f"from {stored_reverse.rate_date}"
        )
        return 1.0 / stored_reverse.rate

    logger.warning(f"Failed to fetch exchange rate {from_currency.value} -> {to_currency.value}, using 1.0")
    return 1.0


def get_exchange_rate(
    session: Session,
    from_currency: Currency,
    to_currency: Currency,
    client: Optional[httpx.Client] = None,
) -> float:
    from_currency = Currency(from_currency)
    to_currency = Currency(to_currency)
    if from_currency == to_currency:
        return 1.0

    cached = _rate_cache.get(_cache_key(from_currency, to_currency))
    if cached is not None and datetime.now() - cached.as_of < CACHE_TTL:
        return cached.rate

    today = date.today()
    db_rate = session.exec(
        select(ExchangeRate).where(
            ExchangeRate.from_currency == from_currency,
            ExchangeRate.to_currency == to_currency,
            ExchangeRate.rate_date == today,
        )
    ).first()
    if db_rate is not None:
        _remember(from_currency, to_currency, db_rate.rate, db_rate.rate_date)
        return db_rate.rate

    try:
        usd_rates = fetch_usd_rates(client)
    except ExchangeRateError:
        return _fallback_rate(session, from_currency, to_currency)

    rate = cross_rate(usd_rates, from_currency, to_currency)
    _store_rate(session, from_currency, to_currency, rate, today)
    session.commit()
    _remember(from_currency, to_currency, rate, today)
    return rate


def convert_amount(
    session: Session,
    amount: float,
    from_currency: Currency,
    to_currency: Currency,
    client: Optional[httpx.Client] = None,
) -> float:
    if Currency(from_currency) == Currency(to_currency):
        return amount
    return amount * get_exchange_rate(session, from_currency, to_currency, client)


def fetch_and_store_all_rates(session: Session, client: Optional[httpx.Client] = None) -> Dict[str, float]:
    """Refresh today's rate for every ordered currency pair with a single API call."""
    usd_rates = fetch_usd_rates(client)
    today = date.today()

    stored: Dict[str, float] = {}
    for from_currency in Currency:
        for to_currency in Currency:
            if from_currency == to_currency:
                continue
            rate = cross_rate(usd_rates, from_currency, to_currency)
            _store_rate(session, from_currency, to_currency, rate, today)
            stored[_cache_key(from_currency, to_currency)] = rate

    session.commit()
    for key, rate in stored.items():
        from_code, to_code = key.split("_")
        _remember(Currency(from_code), Currency(to_code), rate, today)

    logger.info(f"Exchange rates fetched and stored for {len(stored)} currency pairs")
    return stored
