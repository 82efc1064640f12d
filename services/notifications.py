import json
import logging
import os
import tempfile
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

import firebase_admin
from firebase_admin import credentials, messaging
from sqlalchemy.orm import Session

from config import FIREBASE_SERVICE_ACCOUNT
from models.notification import Notification, NotificationType
from models.user import User

logger = logging.getLogger(__name__)

_BG_EXECUTOR = ThreadPoolExecutor(max_workers=4, thread_name_prefix="medzy-bg")


def run_in_background(fn, *args, **kwargs) -> None:
    try:
        _BG_EXECUTOR.submit(fn, *args, **kwargs)
    except RuntimeError as exc:
        # Executor already shut down during process exit.
        logger.warning("Background task submit failed: %s", exc)


def shutdown_background(wait: bool = True) -> None:
    _BG_EXECUTOR.shutdown(wait=wait)


def init_firebase() -> bool:
    """Initialize Firebase Admin from FIREBASE_SERVICE_ACCOUNT if present."""
    if firebase_admin._apps:
        return True
    raw = FIREBASE_SERVICE_ACCOUNT
    if not raw:
        logger.warning("FIREBASE_SERVICE_ACCOUNT not set, push notifications and Google sign-in are disabled")
        return False
    try:
        sa_dict = json.loads(raw)
    except json.JSONDecodeError:
        # Some hosts wrap the JSON in an extra pair of quotes.
        cleaned = raw.strip().strip("'").strip('"')
        try:
            sa_dict = json.loads(cleaned)
        except json.JSONDecodeError:
            tmp = tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False)
            tmp.write(raw)
            tmp.close()
            os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = tmp.name
            firebase_admin.initialize_app()
            logger.info("Firebase Admin SDK initialized from credentials file")
            return True

    if "private_key" in sa_dict and "\\n" in sa_dict["private_key"]:
        sa_dict["private_key"] = sa_dict["private_key"].replace("\\n", "\n")
    firebase_admin.initialize_app(credentials.Certificate(sa_dict))
    logger.info("Firebase Admin SDK initialized")
    return True


def create_notification(
    db: Session,
    user_id: int,
    type_: NotificationType,
    title: str,
    body: str,
    has_action: bool = True,
    dedupe_window_minutes: int | None = 2,
) -> Notification:
    """Stage a notification on the session; callers commit.

    An identical notification created within the dedupe window is returned
    instead of a new row.
    """
    if dedupe_window_minutes and dedupe_window_minutes > 0:
        cutoff = datetime.utcnow() - timedelta(minutes=dedupe_window_minutes)
        existing = (
            db.query(Notification)
            .filter(
                Notification.user_id == user_id,
                Notification.type == type_,
                Notification.title == title,
                Notification.body == body,
                Notification.created_at >= cutoff,
            )
            .order_by(Notification.created_at.desc())
            .first()
        )
        if existing:
            return existing
    notif = Notification(
        user_id=user_id,
        type=type_,
        title=title,
        body=body,
        has_action=has_action,
    )
    db.add(notif)
    return notif


def send_push_if_available(user: User | None, title: str, body: str) -> None:
    if not user or not user.push_token:
        logger.debug("Push skipped: no user or push token")
        return
    send_push_to_token(user.push_token, title, body, user.id)


def send_push_to_token(push_token: str | None, title: str, body: str, user_id: int | None = None) -> None:
    if not push_token:
        return
    if not firebase_admin._apps:
        logger.debug("Push skipped: Firebase Admin is not initialized")
        return
    try:
        msg = messaging.Message(
            token=push_token,
            notification=messaging.Notification(title=title, body=body),
            android=messaging.AndroidConfig(
                notification=messaging.AndroidNotification(channel_id="medzy_alerts"),
            ),
        )
        messaging.send(msg)
    except Exception:
        # Push failures must not break the business flow.
        logger.exception("Push send failed for user %s", user_id or "n/a")


def notify_user(db: Session, user: User, type_: NotificationType, title: str, body: str, **kwargs) -> Notification:
    """Stage an in-app notification and queue the matching push."""
    notif = create_notification(db, user.id, type_, title, body, **kwargs)
    run_in_background(send_push_to_token, user.push_token, title, body, user.id)
    return notif
