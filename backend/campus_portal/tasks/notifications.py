from campus_portal.core.celery_app import celery_app
from campus_portal.core.cache import cache
from campus_portal.core.config import settings
from datetime import datetime
from email.mime.text import MIMEText
import smtplib
import logging

logger = logging.getLogger(__name__)

NOTIFICATION_TTL = 7 * 86400


def notifications_key(user_id: int) -> str:
    return f"user_notifications:{user_id}"


def notifications_read_key(user_id: int) -> str:
    return f"user_notifications_read_at:{user_id}"


def email_configured() -> bool:
    return bool(settings.email_user and settings.email_pass)


@celery_app.task(bind=True, name="send_email_notification", max_retries=3, default_retry_delay=60)
def send_email_notification(self, to_email: str, subject: str, body: str):
    """Send a plain-text email through the configured SMTP relay"""
    if not email_configured():
        logger.warning(f"SMTP credentials not configured, skipping email to {to_email}: {subject}")
        return {'sent': False, 'reason': 'not_configured'}

    msg = MIMEText(body)
    msg["Subject"] = subject
    msg["From"] = settings.email_from or settings.email_user
    msg["To"] = to_email

    try:
        with smtplib.SMTP(settings.email_host, settings.email_port, timeout=30) as server:
            server.starttls()
            server.login(settings.email_user, settings.email_pass)
            server.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        logger.error(f"Failed to send email to {to_email}: {exc}")
        raise self.retry(exc=exc)

    logger.info(f"Email sent to {to_email}: {subject}")
    return {'sent': True, 'to': to_email}


@celery_app.task(name="push_in_app_notification")
def push_in_app_notification(user_id: int, kind: str, title: str, message: str, data: dict = None):
    """Keep the most recent notifications per user in a capped Redis list, newest first"""
    notification = {
        'type': kind,
        'title': title,
        'message': message,
        'data': data or {},
        'timestamp': datetime.utcnow().isoformat(),
    }
    count = cache.push_to_list(
        notifications_key(user_id), notification, settings.max_notifications_per_user, ttl=NOTIFICATION_TTL
    )
    return {'user_id': user_id, 'count': count}


def notify_user(user, kind: str, title: str, message: str, data: dict = None):
    """Queue an email and an in-app notification. Queueing failures are logged, never raised."""
    if user is None:
        return
    try:
        push_in_app_notification.delay(user.id, kind, title, message, data or {})
        if user.email:
            send_email_notification.delay(user.email, title, f"Hello {user.full_name},\n\n{message}\n")
    except Exception as e:
        logger.error(f"Failed to queue '{kind}' notification for user {user.id}: {e}")


def notify_complaint_update(complaint):
    status = complaint.status.replace("_", " ")
    message = f"Your complaint '{complaint.title}' is now {status}."
    if complaint.admin_response:
        message += f"\n\nResponse: {complaint.admin_response}"
    notify_user(complaint.student, "complaint_update", "Complaint status updated", message,
                {'complaint_id': complaint.id, 'status': complaint.status})


def notify_application_decision(application):
    message = f"Your {application.application_type} application '{application.subject}' was {application.status}."
    if application.reviewer_remarks:
        message += f"\n\nRemarks: {application.reviewer_remarks}"
    notify_user(application.student, "application_decision", "Application reviewed", message,
                {'application_id': application.id, 'status': application.status})


def notify_cheating_record(record):
    message = (
        f"A disciplinary record has been filed against you for course {record.course}."
        + (f"\n\nReason: {record.reason}" if record.reason else "")
    )
    notify_user(record.student, "cheating_record", "Disciplinary record filed", message,
                {'record_id': record.id, 'course': record.course})
