import logging

from sqlalchemy import update

from classes.errors import AlreadySubmitted, InvalidAttempt, ValidationError
from classes.quiz_scoring import check_answers, relevant_answers, score_quiz
from models import db
from models.quiz_attempts import QuizAttempt
from models.quiz_attempts_answers import QuizAnswer
from utils import catalog
from utils.clock import system_clock
from utils.helpers import insert_unique

logger = logging.getLogger(__name__)


class QuizAttemptManager:
    """OPEN -> CLOSED lifecycle of quiz attempts. CLOSED is terminal."""

    def __init__(self, clock=None):
        self.clock = clock or system_clock

    @staticmethod
    def _get_quiz(quiz_id):
        quiz = catalog.get_quiz(quiz_id)
        if not quiz:
            raise ValidationError("Quiz not found", quiz_id=quiz_id)
        return quiz

    @staticmethod
    def find_open_attempt(student_id, quiz_id):
        return (
            QuizAttempt.query
            .filter_by(student_id=student_id, quiz_id=quiz_id)
            .filter(QuizAttempt.completed_at.is_(None))
            .first()
        )

    def start_attempt(self, student_id, quiz_id):
        """Return the open attempt for (student, quiz), creating it if there is none."""
        self._get_quiz(quiz_id)

        attempt = self.find_open_attempt(student_id, quiz_id)
        if attempt:
            return attempt

        attempt, _ = insert_unique(
            QuizAttempt(
                student_id=student_id,
                quiz_id=quiz_id,
                started_at=self.clock.now(),
                open_slot=True,
            ),
            lambda: self.find_open_attempt(student_id, quiz_id),
        )
        return attempt

    def submit_attempt(self, student_id, quiz_id, attempt_id, answers):
        """
        Score ``answers`` and close the attempt. Returns ``(attempt, result)``.

        Closing is a conditional UPDATE on ``completed_at IS NULL`` so that of
        two concurrent submissions exactly one closes the attempt; the other
        gets AlreadySubmitted and its answers are never written.
        """
        quiz = self._get_quiz(quiz_id)

        attempt = QuizAttempt.query.filter_by(id=attempt_id, student_id=student_id, quiz_id=quiz_id).first()
        if not attempt:
            raise InvalidAttempt(attempt_id=attempt_id)
        if not attempt.is_open:
            raise AlreadySubmitted(attempt_id=attempt_id)

        check_answers(answers)
        definition = quiz.to_definition()
        result = score_quiz(definition, answers)

        closed = db.session.execute(
            update(QuizAttempt)
            .where(QuizAttempt.id == attempt.id, QuizAttempt.completed_at.is_(None))
            .values(
                completed_at=self.clock.now(),
                score=result.score,
                passed=result.passed,
                open_slot=None,
            )
            .execution_options(synchronize_session=False)
        )
        if closed.rowcount != 1:
            db.session.rollback()
            raise AlreadySubmitted(attempt_id=attempt_id)

        db.session.add_all([
            QuizAnswer(attempt_id=attempt.id, question_id=a.question_id, option_id=a.option_id)
            for a in relevant_answers(definition, answers)
        ])
        db.session.commit()
        db.session.refresh(attempt)

        logger.info("User %s submitted attempt %s for quiz %s: score %s, passed %s",
                    student_id, attempt.id, quiz_id, result.score, result.passed)
        return attempt, result

    @staticmethod
    def list_attempts(student_id, quiz_id):
        return (
            QuizAttempt.query
            .filter_by(student_id=student_id, quiz_id=quiz_id)
            .order_by(QuizAttempt.started_at.desc(), QuizAttempt.id.desc())
            .all()
        )
