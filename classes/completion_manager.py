import logging

from classes.certificate_issuer import CertificateIssuer
from classes.errors import ValidationError
from classes.progress_manager import ProgressManager
from utils import catalog
from utils.badge_service import evaluate_course_completion_badges
from utils.clock import system_clock

logger = logging.getLogger(__name__)


class CompletionManager:
    """
    Runs what follows "lesson complete": progress, then certificate and badges
    once a course reaches 100%.

    Every step commits on its own and is idempotent, so a retried or
    duplicated call converges on the same rows instead of needing one
    transaction around the whole chain. Duplicate certificates and badges are
    stopped by the unique constraints on their tables.
    """

    def __init__(self, notifier=None, clock=None, use_stored_fallback=None):
        self.notifier = notifier
        self.clock = clock or system_clock
        self.progress = ProgressManager(clock=self.clock, use_stored_fallback=use_stored_fallback)
        self.certificates = CertificateIssuer(notifier=notifier, clock=self.clock)

    def complete_lesson(self, student_id, lesson_id):
        course_id = catalog.lesson_course_id(lesson_id)
        if course_id is None:
            raise ValidationError("Lesson not found", lesson_id=lesson_id)

        self.progress.mark_lesson_complete(student_id, lesson_id)

        lesson_ids = catalog.course_lesson_ids(course_id)
        progress = self.progress.compute(student_id, lesson_ids)

        if progress < 100:
            self.progress.store_progress(student_id, course_id, progress)
            return {
                "completed": True,
                "progress": progress,
                "certificate_generated": False,
            }

        certificate, _ = self.certificates.issue_if_absent(student_id, course_id)
        self.progress.store_progress(student_id, course_id, 100)
        new_badges = evaluate_course_completion_badges(student_id, notifier=self.notifier, clock=self.clock)

        return {
            "completed": True,
            "progress": progress,
            "certificate_generated": True,
            "verification_code": certificate.verification_code,
            "new_badges": new_badges,
        }

    def get_course_progress(self, student_id, course_id):
        return self.progress.get_course_progress(student_id, course_id)

    def request_certificate(self, student_id, course_id):
        """On-demand issuance for a finished course. Returns ``(certificate, created)``."""
        if not catalog.get_course(course_id):
            raise ValidationError("Course not found", course_id=course_id)
        if not self.progress.get_enrolment(student_id, course_id):
            raise ValidationError("Not enrolled in this course", course_id=course_id)

        lesson_ids = catalog.course_lesson_ids(course_id)
        if not lesson_ids:
            raise ValidationError("Course has no lessons", course_id=course_id)

        progress = self.progress.compute(student_id, lesson_ids)
        if progress < 100:
            raise ValidationError("Course not completed yet", progress=progress)

        certificate, created = self.certificates.issue_if_absent(student_id, course_id)
        self.progress.store_progress(student_id, course_id, 100)
        evaluate_course_completion_badges(student_id, notifier=self.notifier, clock=self.clock)
        return certificate, created
