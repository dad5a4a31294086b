import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from sqlmodel import SQLModel, Session

from ..config import settings
from ..core.currency import Currency, currency_options
from ..core.security import get_current_user
from ..database import get_session
from ..models.user import User
from ..services import exchange_rates


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/exchange-rates",
    tags=["exchange-rates"],
)

cron_router = APIRouter(
    prefix="/cron",
    tags=["cron"],
)


class RateOut(SQLModel):
    from_currency: Currency
    to_currency: Currency
    rate: float
    amount: float
    converted: float


class RefreshOut(SQLModel):
    message: str
    rates: Dict[str, float]


class CronRefreshOut(SQLModel):
    message: str
    timestamp: str


def _refresh_rates(session: Session) -> Dict[str, float]:
    try:
        return exchange_rates.fetch_and_store_all_rates(session)
    except exchange_rates.ExchangeRateError as e:
        logger.error(f"Error updating exchange rates: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to update exchange rates",
        )


@router.get(
    "/currencies",
    response_model=List[Dict[str, str]],
)
def list_currencies():
    return currency_options()


@router.get(
    "",
    response_model=RateOut,
)
def get_rate(
    from_currency: Currency,
    to_currency: Currency,
    amount: float = Query(default=1.0),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    rate = exchange_rates.get_exchange_rate(session, from_currency, to_currency)
    return RateOut(
        from_currency=from_currency,
        to_currency=to_currency,
        rate=rate,
        amount=amount,
        converted=amount * rate,
    )


@router.post(
    "/refresh",
    response_model=RefreshOut,
)
def refresh_rates(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    rates = _refresh_rates(session)
    return RefreshOut(message="Exchange rates updated successfully", rates=rates)


@cron_router.get(
    "/exchange-rates",
    response_model=CronRefreshOut,
)
def cron_refresh_rates(
    authorization: Optional[str] = Header(default=None),
    session: Session = Depends(get_session),
):
    """Daily refresh, meant to be hit by an external scheduler at 01:00.

    Requires ``Authorization: Bearer <CRON_SECRET>`` whenever CRON_SECRET is set.
    """
    if settings.cron_secret:
        if authorization != f"Bearer {settings.cron_secret}":
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    else:
        logger.warning("CRON_SECRET is not set, exchange rate cron endpoint is unprotected")

    _refresh_rates(session)
    return CronRefreshOut(
        message="Exchange rates updated successfully",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
