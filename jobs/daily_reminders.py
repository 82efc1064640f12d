"""One-shot reminder run for deployments without the in-process loop.

Usage: ``python -m jobs.daily_reminders`` from a cron job or scheduler.
"""

import logging

from database import SessionLocal, connect_db
from main import configure_logging
from services.notifications import init_firebase, shutdown_background
from services.reminders import run_reminder_cycle

logger = logging.getLogger("medzy.jobs")


def main() -> dict:
    configure_logging()
    if not connect_db():
        raise SystemExit(1)
    init_firebase()
    db = SessionLocal()
    try:
        result = run_reminder_cycle(db)
        logger.info("Reminders sent: %s, refill alerts: %s", result["reminders_sent"], result["refill_alerts"])
    finally:
        db.close()
    # Let queued pushes and emails finish before the process exits.
    shutdown_background(wait=True)
    return result


if __name__ == "__main__":
    main()
