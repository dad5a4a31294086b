import logging

from sqlmodel import SQLModel, create_engine, Session
from .config import settings
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import NullPool


logger = logging.getLogger(__name__)


def normalize_database_url(url: str) -> str:
    # Some providers hand out postgres:// URLs, SQLAlchemy wants postgresql://
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


if settings.database_url.startswith("sqlite"):
    engine = create_engine(
        settings.database_url,
        echo=settings.database_echo,
        connect_args={"check_same_thread": False, "timeout": 60},
        poolclass=NullPool,  # avoid multiple pooled connections holding write locks
    )
    # Configure SQLite pragmas to reduce locking
    try:
        with engine.connect() as conn:
            conn.exec_driver_sql("PRAGMA journal_mode=WAL;")
            conn.exec_driver_sql("PRAGMA busy_timeout=60000;")
    except OperationalError:
        # Database may be momentarily locked during reloader startup
        logger.warning("Could not configure SQLite pragmas, continuing with defaults")
else:
    engine = create_engine(
        normalize_database_url(settings.database_url),
        echo=settings.database_echo,
        pool_pre_ping=True,
    )


def get_session():
    with Session(engine) as session:
        yield session


def init_db():
    from .models import user, budget, membership, category, transaction, plan, exchange_rate  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ready")
