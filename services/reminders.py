import logging
import math
import threading
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from config import REFILL_ALERT_DAYS, REMINDER_INTERVAL_SECONDS, REMINDER_TIMEZONE
from database import SessionLocal
from models.notification import Notification, NotificationType
from models.reminder import MedicineReminder
from models.user import User
from services.email_service import send_reminder_email
from services.notifications import create_notification, run_in_background, send_push_to_token

logger = logging.getLogger(__name__)

LOCAL_TZ = ZoneInfo(REMINDER_TIMEZONE)


def parse_times(raw: str | None) -> list[str]:
    return [t.strip() for t in (raw or "").split(",") if t.strip()]


def _as_utc(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def local_now(now: datetime | None = None) -> datetime:
    now = _as_utc(now) or datetime.now(timezone.utc)
    return now.astimezone(LOCAL_TZ)


def units_per_day(record: MedicineReminder) -> int:
    return max(len(parse_times(record.times)), 1) * max(record.units_per_dose or 1, 1)


def calculate_days_left(record: MedicineReminder, today: date | None = None) -> int:
    today = today or local_now().date()
    counted_from = record.counted_from or record.start_date or today
    per_day = units_per_day(record)
    elapsed_days = max((today - counted_from).days, 0)
    remaining_units = max((record.quantity_units or 0) - elapsed_days * per_day, 0)
    if remaining_units <= 0:
        return 0
    return int(math.ceil(remaining_units / per_day))


def is_scheduled_on(record: MedicineReminder, day: date) -> bool:
    if not record.is_active:
        return False
    if record.start_date and day < record.start_date:
        return False
    if record.end_date and day > record.end_date:
        return False
    return True


def due_slot(record: MedicineReminder, now: datetime | None = None, window_seconds: int | None = None) -> datetime | None:
    """Return the local slot datetime that is due right now, if any.

    A slot is due when ``slot <= now < slot + window`` and it has not been
    notified yet.
    """
    now_local = local_now(now)
    if not is_scheduled_on(record, now_local.date()):
        return None
    window = timedelta(seconds=max(window_seconds or REMINDER_INTERVAL_SECONDS, 60))
    last = _as_utc(record.last_notified_at)
    for raw in parse_times(record.times):
        hh, mm = raw.split(":")
        slot = datetime.combine(now_local.date(), time(int(hh), int(mm)), tzinfo=LOCAL_TZ)
        if slot <= now_local < slot + window:
            if last and last >= slot.astimezone(timezone.utc):
                continue
            return slot
    return None


def list_due_reminders(db: Session, user_id: int | None = None, now: datetime | None = None) -> list[tuple[MedicineReminder, datetime]]:
    q = db.query(MedicineReminder).filter(MedicineReminder.is_active.is_(True))
    if user_id is not None:
        q = q.filter(MedicineReminder.user_id == user_id)
    due = []
    for record in q.all():
        slot = due_slot(record, now)
        if slot is not None:
            due.append((record, slot))
    return due


def dispatch_due_reminders(db: Session, now: datetime | None = None) -> int:
    now_utc = _as_utc(now) or datetime.now(timezone.utc)
    sent = 0
    for record, slot in list_due_reminders(db, now=now_utc):
        user = db.query(User).filter(User.id == record.user_id).first()
        if not user or not user.is_active:
            continue
        title = f"Medicine Reminder: {record.medicine_name}"
        body = f"Time to take {record.dosage} of {record.medicine_name} ({slot.strftime('%H:%M')})."
        create_notification(db, user.id, NotificationType.reminder, title, body, has_action=True, dedupe_window_minutes=None)
        record.last_notified_at = now_utc
        run_in_background(send_push_to_token, user.push_token, title, body, user.id)
        sent += 1
    if sent:
        db.commit()
    return sent


def send_refill_alerts_for_user(db: Session, user: User, now: datetime | None = None) -> int:
    """Create at most one refill alert per medicine per local day."""
    now_local = local_now(now)
    day_start_utc = datetime(now_local.year, now_local.month, now_local.day, tzinfo=LOCAL_TZ).astimezone(timezone.utc)
    reminders = (
        db.query(MedicineReminder)
        .filter(MedicineReminder.user_id == user.id, MedicineReminder.is_active.is_(True))
        .all()
    )
    created_count = 0
    for record in reminders:
        if not is_scheduled_on(record, now_local.date()):
            continue
        days_left = calculate_days_left(record, now_local.date())
        if days_left > REFILL_ALERT_DAYS:
            continue
        title = f"Refill Reminder: {record.medicine_name}"
        already = (
            db.query(Notification)
            .filter(
                Notification.user_id == user.id,
                Notification.type == NotificationType.refill,
                Notification.title == title,
                Notification.created_at >= day_start_utc.replace(tzinfo=None),
            )
            .first()
        )
        if already:
            continue
        body = f"{record.medicine_name} has {days_left} day(s) left. Time to reorder."
        create_notification(db, user.id, NotificationType.refill, title, body, has_action=True, dedupe_window_minutes=None)
        run_in_background(send_push_to_token, user.push_token, title, body, user.id)
        run_in_background(send_reminder_email, user.email, title, body)
        created_count += 1

    if created_count > 0:
        db.commit()
    return created_count


def send_refill_alerts(db: Session, now: datetime | None = None) -> int:
    user_ids = [row[0] for row in db.query(MedicineReminder.user_id).distinct().all()]
    total = 0
    for user in db.query(User).filter(User.id.in_(user_ids), User.is_active.is_(True)).all():
        total += send_refill_alerts_for_user(db, user, now)
    return total


def run_reminder_cycle(db: Session, now: datetime | None = None) -> dict:
    return {
        "reminders_sent": dispatch_due_reminders(db, now),
        "refill_alerts": send_refill_alerts(db, now),
    }


class ReminderLoop(threading.Thread):
    """Daemon thread that runs a reminder cycle every ``interval_seconds``."""

    def __init__(self, interval_seconds: int = REMINDER_INTERVAL_SECONDS, session_factory=SessionLocal):
        super().__init__(name="medzy-reminders", daemon=True)
        self.interval_seconds = max(interval_seconds, 1)
        self.session_factory = session_factory
        self._stop_event = threading.Event()

    def run(self) -> None:
        logger.info("Reminder loop started (every %ss, tz=%s)", self.interval_seconds, REMINDER_TIMEZONE)
        while not self._stop_event.wait(self.interval_seconds):
            self.tick()
        logger.info("Reminder loop stopped")

    def tick(self) -> dict | None:
        db = self.session_factory()
        try:
            result = run_reminder_cycle(db)
            if result["reminders_sent"] or result["refill_alerts"]:
                logger.info("Reminder cycle: %s", result)
            return result
        except Exception:
            db.rollback()
            logger.exception("Reminder cycle failed")
            return None
        finally:
            db.close()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout)


_loop: ReminderLoop | None = None


def start_notification_service() -> ReminderLoop:
    global _loop
    if _loop is None or not _loop.is_alive():
        _loop = ReminderLoop()
        _loop.start()
    return _loop


def stop_notification_service() -> None:
    global _loop
    if _loop is not None:
        _loop.stop()
        _loop = None
