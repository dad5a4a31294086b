import uuid
from datetime import date, datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field

from ..core.currency import Currency


class ExchangeRate(SQLModel, table=True):
    __tablename__ = "exchange_rates"
    __table_args__ = (
        UniqueConstraint("from_currency", "to_currency", "rate_date", name="uq_exchange_rates_pair_date"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    from_currency: Currency = Field(index=True)
    to_currency: Currency = Field(index=True)
    rate: float
    rate_date: date = Field(index=True)

    created_at: datetime = Field(default_factory=datetime.utcnow)
