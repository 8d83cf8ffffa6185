import logging
from datetime import datetime, timedelta

from models.certificates import Certificate
from utils import catalog
from utils.clock import system_clock
from utils.email import CERTIFICATE_ISSUED, notify_safely
from utils.helpers import insert_unique

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)


def build_verification_code(course_id, student_id, issued_at):
    """CERT-<course>-<epoch ms>-<student>: readable, sorts by issue time within a course, one per learner."""
    epoch_ms = (issued_at - EPOCH) // timedelta(milliseconds=1)
    return f"CERT-{int(course_id):06d}-{epoch_ms}-{int(student_id)}"


class CertificateIssuer:
    def __init__(self, notifier=None, clock=None):
        self.notifier = notifier
        self.clock = clock or system_clock

    @staticmethod
    def find(student_id, course_id):
        return Certificate.query.filter_by(student_id=student_id, course_id=course_id).first()

    @staticmethod
    def find_by_code(verification_code):
        return Certificate.query.filter_by(verification_code=verification_code).first()

    @staticmethod
    def list_for_student(student_id):
        return (
            Certificate.query
            .filter_by(student_id=student_id)
            .order_by(Certificate.issued_at.desc(), Certificate.id.desc())
            .all()
        )

    def issue_if_absent(self, student_id, course_id):
        """
        At most one certificate per (student, course). Returns
        ``(certificate, created)``; an existing certificate comes back
        unchanged with ``created`` False.
        """
        existing = self.find(student_id, course_id)
        if existing:
            return existing, False

        issued_at = self.clock.now()
        certificate, created = insert_unique(
            Certificate(
                student_id=student_id,
                course_id=course_id,
                issued_at=issued_at,
                verification_code=build_verification_code(course_id, student_id, issued_at),
            ),
            lambda: self.find(student_id, course_id),
        )
        if not created:
            return certificate, False

        logger.info("Issued certificate %s to user %s for course %s",
                    certificate.verification_code, student_id, course_id)
        course = catalog.get_course(course_id)
        notify_safely(self.notifier, student_id, CERTIFICATE_ISSUED, {
            "course_id": course_id,
            "course_title": course.title if course else "",
            "verification_code": certificate.verification_code,
        })
        return certificate, True
