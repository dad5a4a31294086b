"""Fetch today's exchange rates and store them; run daily from system cron.

    0 1 * * *  cd /srv/budget && python scripts/refresh_exchange_rates.py
"""
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from sqlmodel import Session

from budget_app.config import settings
from budget_app.database import engine, init_db
from budget_app.services.exchange_rates import ExchangeRateError, fetch_and_store_all_rates


def main() -> int:
    logging.basicConfig(level=settings.log_level.upper())
    print(f"Database URL: {settings.database_url}")
    init_db()
    with Session(engine) as session:
        try:
            rates = fetch_and_store_all_rates(session)
        except ExchangeRateError as e:
            print(f"Failed to update exchange rates: {e}")
            return 1
    for pair, rate in sorted(rates.items()):
        print(f"{pair}: {rate:.6f}")
    print("Done.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
