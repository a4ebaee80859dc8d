import logging
import time
import uuid

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from clubhub.celery_app import celery_app
from clubhub.logger import upload_events
from clubhub.mailer import get_mailer, render_event_confirmation
from clubhub.models.db import get_session_maker
from clubhub.models.event import EventRegistration
from clubhub.uploads import get_upload_settings

logger = logging.getLogger(__name__)


@celery_app.task(name="send_event_confirmation", bind=True, max_retries=3)
def send_event_confirmation_task(self, registration_id: str) -> dict:
    """Send the confirmation e-mail for one event registration.

    Args:
        registration_id: Database ID of the registration

    Returns:
        dict with status and whether the e-mail went out
    """
    session_maker = get_session_maker()
    with session_maker() as db:
        stmt = select(EventRegistration).options(selectinload(EventRegistration.event)).where(EventRegistration.id == uuid.UUID(registration_id))
        registration = db.execute(stmt).scalar_one_or_none()
        if not registration:
            logger.info("Registration %s no longer exists, skipping confirmation", registration_id)
            return {"status": "skipped", "registration_id": registration_id, "sent": False}

        event = registration.event
        subject, html = render_event_confirmation(
            {"title": event.title, "date": event.date, "end_date": event.end_date, "venue": event.venue},
            {"name": registration.name, "registration_no": registration.registration_no, "email": registration.email},
        )
        to_email = registration.email

    try:
        sent = get_mailer().send(to_email, subject, html)
    except Exception as e:
        logger.error("Failed to send confirmation for registration %s: %s", registration_id, e)
        try:
            raise self.retry(exc=e, countdown=60)
        except self.MaxRetriesExceededError:
            return {"status": "error", "registration_id": registration_id, "sent": False, "message": str(e)}

    return {"status": "success", "registration_id": registration_id, "sent": sent}


@celery_app.task(name="cleanup_stale_uploads")
def cleanup_stale_uploads_task() -> dict:
    """Delete temp upload files left behind by crashed requests."""
    settings = get_upload_settings()
    upload_dir = settings.dir
    if not upload_dir.is_dir():
        return {"status": "complete", "deleted": 0, "failed": 0}

    cutoff = time.time() - settings.stale_after_seconds
    deleted = 0
    failed = 0
    for path in upload_dir.iterdir():
        if not path.is_file():
            continue
        try:
            if path.stat().st_mtime >= cutoff:
                continue
            path.unlink()
            deleted += 1
        except OSError as e:
            failed += 1
            upload_events.log_event("temp_cleanup_failed", level=logging.WARNING, path=str(path), error=str(e))

    logger.info("Stale upload cleanup complete: %d deleted, %d failed", deleted, failed)
    return {"status": "complete", "deleted": deleted, "failed": failed}
