import logging

from flask import current_app
from flask_mail import Message

from extensions import mail
from models import db
from models.users import User

logger = logging.getLogger(__name__)

CERTIFICATE_ISSUED = "certificate_issued"
BADGE_EARNED = "badge_earned"


def send_email(to, subject, body):
    """Sends an email using Flask-Mail."""
    msg = Message(subject=subject, recipients=[to], body=body)
    mail.send(msg)
    return True


def render_certificate_issued(user, payload, frontend_url):
    subject = f"Your certificate for {payload['course_title']}"
    body = (
        f"Hi {user.display_name},\n\n"
        f"Congratulations on completing {payload['course_title']}!\n"
        f"Certificate ID: {payload['verification_code']}\n\n"
        f"View it at {frontend_url}/courses/{payload['course_id']}/certificate\n"
    )
    return subject, body


def render_badge_earned(user, payload, frontend_url):
    icon = payload.get("badge_icon") or ""
    subject = f"You earned the {payload['badge_name']} badge"
    body = (
        f"Hi {user.display_name},\n\n"
        f"{icon} You just earned the \"{payload['badge_name']}\" badge "
        f"(+{payload.get('points', 0)} points).\n\n"
        f"See all your badges at {frontend_url}/profile\n"
    )
    return subject, body


TEMPLATES = {
    CERTIFICATE_ISSUED: render_certificate_issued,
    BADGE_EARNED: render_badge_earned,
}


class MailNotifier:
    """Best-effort delivery: returns False on any failure, never raises."""

    def notify(self, user_id, template_kind, payload):
        if not current_app.config.get("NOTIFICATIONS_ENABLED", True):
            logger.warning("Notifications disabled; dropping %s for user %s", template_kind, user_id)
            return False

        render = TEMPLATES.get(template_kind)
        if render is None:
            logger.warning("Unknown notification template %r", template_kind)
            return False

        try:
            user = db.session.get(User, user_id)
            if user is None:
                logger.warning("No recipient for %s: user %s not found", template_kind, user_id)
                return False
            subject, body = render(user, payload, current_app.config.get("FRONTEND_URL", ""))
            return send_email(user.email, subject, body)
        except Exception:
            logger.exception("Failed to send %s notification to user %s", template_kind, user_id)
            return False


def notify_safely(notifier, user_id, template_kind, payload):
    """Call any notifier without letting its failure reach the caller."""
    if notifier is None:
        return False
    try:
        return bool(notifier.notify(user_id, template_kind, payload))
    except Exception:
        logger.exception("Notifier raised while sending %s to user %s", template_kind, user_id)
        return False
