from flask import current_app

from models import db
from models.enrolments import Enrolment
from models.lesson_progress import LessonCompletion
from utils import catalog
from utils.clock import system_clock
from utils.helpers import insert_unique
from utils.rounding import percentage


def calculate_progress(total_lessons, completed_lessons, fallback=0):
    """Percentage of a course's lessons completed; ``fallback`` for a course without lessons."""
    if total_lessons <= 0:
        return fallback
    return percentage(min(completed_lessons, total_lessons), total_lessons)


def apply_stored_fallback(computed, stored):
    """
    Display rule for seeded or migrated enrolments: a computed 0 yields to a
    non-zero stored value. This hides missing completion rows rather than
    fixing them, which is why it sits behind PROGRESS_STORED_FALLBACK.
    """
    if computed == 0 and stored:
        return stored
    return computed


class ProgressManager:
    def __init__(self, clock=None, use_stored_fallback=None):
        self.clock = clock or system_clock
        self._use_stored_fallback = use_stored_fallback

    @property
    def use_stored_fallback(self):
        if self._use_stored_fallback is not None:
            return self._use_stored_fallback
        return bool(current_app.config.get("PROGRESS_STORED_FALLBACK", False))

    @staticmethod
    def _find_completion(student_id, lesson_id):
        return LessonCompletion.query.filter_by(student_id=student_id, lesson_id=lesson_id).first()

    @staticmethod
    def get_enrolment(student_id, course_id):
        return Enrolment.query.filter_by(student_id=student_id, course_id=course_id).first()

    def mark_lesson_complete(self, student_id, lesson_id):
        """Upsert the completion row; repeated calls leave it completed."""
        completion = self._find_completion(student_id, lesson_id)
        if completion is None:
            completion, created = insert_unique(
                LessonCompletion(
                    student_id=student_id,
                    lesson_id=lesson_id,
                    completed=True,
                    completed_at=self.clock.now(),
                ),
                lambda: self._find_completion(student_id, lesson_id),
            )
            if created:
                return completion

        if not completion.completed:
            completion.completed = True
            completion.completed_at = self.clock.now()
            db.session.commit()
        return completion

    @staticmethod
    def completed_count(student_id, lesson_ids):
        if not lesson_ids:
            return 0
        return (
            LessonCompletion.query
            .filter(
                LessonCompletion.student_id == student_id,
                LessonCompletion.completed.is_(True),
                LessonCompletion.lesson_id.in_(lesson_ids),
            )
            .count()
        )

    def compute(self, student_id, lesson_ids, fallback=0):
        return calculate_progress(len(lesson_ids), self.completed_count(student_id, lesson_ids), fallback)

    def get_course_progress(self, student_id, course_id):
        """Fresh progress for one course; the stored value only matters under the fallback policy."""
        lesson_ids = catalog.course_lesson_ids(course_id)
        if not self.use_stored_fallback:
            return self.compute(student_id, lesson_ids)

        enrolment = self.get_enrolment(student_id, course_id)
        stored = enrolment.progress if enrolment else 0
        return apply_stored_fallback(self.compute(student_id, lesson_ids, fallback=stored), stored)

    @staticmethod
    def store_progress(student_id, course_id, progress):
        """Cache the last computed value on the enrolment, a no-op without one."""
        updated = (
            Enrolment.query
            .filter_by(student_id=student_id, course_id=course_id)
            .update({Enrolment.progress: progress}, synchronize_session=False)
        )
        db.session.commit()
        return updated

    @staticmethod
    def lesson_progress(student_id, course_id):
        lesson_ids = catalog.course_lesson_ids(course_id)
        if not lesson_ids:
            return []
        return (
            LessonCompletion.query
            .filter(
                LessonCompletion.student_id == student_id,
                LessonCompletion.lesson_id.in_(lesson_ids),
            )
            .order_by(LessonCompletion.id)
            .all()
        )

    def enrolments_with_progress(self, student_id):
        enrolments = (
            Enrolment.query
            .filter_by(student_id=student_id)
            .order_by(Enrolment.enrolled_at.desc(), Enrolment.id.desc())
            .all()
        )
        return [
            {
                "enrolment": enrolment,
                "progress": self.get_course_progress(student_id, enrolment.course_id),
            }
            for enrolment in enrolments
        ]
