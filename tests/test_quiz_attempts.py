import pytest

from classes.attempt_manager import QuizAttemptManager
from classes.errors import AlreadySubmitted, InvalidAttempt, ValidationError
from classes.quiz_scoring import SubmittedAnswer
from conftest import correct_option_id, wrong_option_id
from models import QuizAnswer, QuizAttempt


@pytest.fixture
def manager(clock):
    return QuizAttemptManager(clock=clock)


@pytest.fixture
def two_question_quiz(make_quiz):
    return make_quiz([(1, 0), (1, 1)], passing_score=70)


def test_starting_twice_returns_the_same_open_attempt(manager, student, two_question_quiz):
    first = manager.start_attempt(student.id, two_question_quiz.id)
    second = manager.start_attempt(student.id, two_question_quiz.id)

    assert first.id == second.id
    assert first.state == "OPEN"
    assert QuizAttempt.query.count() == 1


def test_start_for_missing_quiz(manager, student):
    with pytest.raises(ValidationError, match="Quiz not found"):
        manager.start_attempt(student.id, 77)


def test_submit_scores_and_closes_the_attempt(manager, clock, student, two_question_quiz):
    q1, q2 = two_question_quiz.questions
    attempt = manager.start_attempt(student.id, two_question_quiz.id)
    clock.advance(minutes=4)

    closed, result = manager.submit_attempt(student.id, two_question_quiz.id, attempt.id, [
        SubmittedAnswer(q1.id, correct_option_id(q1)),
        SubmittedAnswer(q2.id, wrong_option_id(q2)),
    ])

    assert (result.score, result.passed, result.correct_count) == (50, False, 1)
    assert closed.state == "CLOSED"
    assert closed.score == 50
    assert closed.passed is False
    assert closed.completed_at == clock.current
    assert QuizAnswer.query.filter_by(attempt_id=attempt.id).count() == 2


def test_answers_to_unknown_questions_are_not_stored(manager, student, two_question_quiz):
    q1, _ = two_question_quiz.questions
    attempt = manager.start_attempt(student.id, two_question_quiz.id)

    _, result = manager.submit_attempt(student.id, two_question_quiz.id, attempt.id, [
        SubmittedAnswer(q1.id, correct_option_id(q1)),
        SubmittedAnswer(9999, 1),
    ])

    assert result.score == 50
    assert [a.question_id for a in QuizAnswer.query.all()] == [q1.id]


def test_option_from_another_question_is_wrong_but_stored(manager, student, two_question_quiz):
    q1, q2 = two_question_quiz.questions
    attempt = manager.start_attempt(student.id, two_question_quiz.id)

    _, result = manager.submit_attempt(student.id, two_question_quiz.id, attempt.id, [
        SubmittedAnswer(q1.id, correct_option_id(q2)),
    ])

    assert result.correctness[q1.id] is False
    assert QuizAnswer.query.one().option_id == correct_option_id(q2)


def test_empty_submission_closes_with_zero(manager, student, two_question_quiz):
    attempt = manager.start_attempt(student.id, two_question_quiz.id)

    closed, result = manager.submit_attempt(student.id, two_question_quiz.id, attempt.id, [])

    assert result.score == 0
    assert closed.state == "CLOSED"
    assert QuizAnswer.query.count() == 0


def test_resubmitting_is_rejected_and_keeps_the_first_score(manager, student, two_question_quiz):
    q1, q2 = two_question_quiz.questions
    attempt = manager.start_attempt(student.id, two_question_quiz.id)
    manager.submit_attempt(student.id, two_question_quiz.id, attempt.id, [SubmittedAnswer(q1.id, correct_option_id(q1))])

    with pytest.raises(AlreadySubmitted):
        manager.submit_attempt(student.id, two_question_quiz.id, attempt.id, [
            SubmittedAnswer(q1.id, correct_option_id(q1)),
            SubmittedAnswer(q2.id, correct_option_id(q2)),
        ])

    assert QuizAttempt.query.one().score == 50
    assert QuizAnswer.query.count() == 1


def test_attempt_of_another_student_is_invalid(manager, student, make_user, two_question_quiz):
    attempt = manager.start_attempt(student.id, two_question_quiz.id)
    intruder = make_user()

    with pytest.raises(InvalidAttempt):
        manager.submit_attempt(intruder.id, two_question_quiz.id, attempt.id, [])

    assert QuizAttempt.query.one().state == "OPEN"


def test_attempt_of_another_quiz_is_invalid(manager, student, make_quiz, two_question_quiz):
    other_quiz = make_quiz([(1, 0)], title="Other")
    attempt = manager.start_attempt(student.id, two_question_quiz.id)

    with pytest.raises(InvalidAttempt):
        manager.submit_attempt(student.id, other_quiz.id, attempt.id, [])


def test_unknown_attempt_is_invalid(manager, student, two_question_quiz):
    with pytest.raises(InvalidAttempt) as excinfo:
        manager.submit_attempt(student.id, two_question_quiz.id, 31337, [])

    assert excinfo.value.status_code == 404


def test_submit_for_missing_quiz_is_a_validation_error(manager, student):
    with pytest.raises(ValidationError):
        manager.submit_attempt(student.id, 55, 1, [])


def test_duplicate_answers_leave_the_attempt_open(manager, student, two_question_quiz):
    q1, _ = two_question_quiz.questions
    attempt = manager.start_attempt(student.id, two_question_quiz.id)

    with pytest.raises(ValidationError):
        manager.submit_attempt(student.id, two_question_quiz.id, attempt.id, [
            SubmittedAnswer(q1.id, correct_option_id(q1)),
            SubmittedAnswer(q1.id, wrong_option_id(q1)),
        ])

    assert QuizAttempt.query.one().state == "OPEN"
    assert QuizAnswer.query.count() == 0


def test_a_closed_attempt_makes_room_for_a_new_one(manager, clock, student, two_question_quiz):
    first = manager.start_attempt(student.id, two_question_quiz.id)
    manager.submit_attempt(student.id, two_question_quiz.id, first.id, [])
    clock.advance(hours=1)

    second = manager.start_attempt(student.id, two_question_quiz.id)

    assert second.id != first.id
    assert second.state == "OPEN"
    assert [a.id for a in QuizAttemptManager.list_attempts(student.id, two_question_quiz.id)] == [second.id, first.id]


def test_concurrent_start_returns_the_winning_attempt(monkeypatch, manager, student, two_question_quiz):
    winner = manager.start_attempt(student.id, two_question_quiz.id)

    real_find = QuizAttemptManager.find_open_attempt
    calls = []

    def stale_find(student_id, quiz_id):
        calls.append(quiz_id)
        if len(calls) == 1:
            return None
        return real_find(student_id, quiz_id)

    monkeypatch.setattr(QuizAttemptManager, "find_open_attempt", staticmethod(stale_find))

    loser = manager.start_attempt(student.id, two_question_quiz.id)

    assert len(calls) == 2
    assert loser.id == winner.id
    assert QuizAttempt.query.count() == 1


def test_concurrent_submit_closes_only_once(monkeypatch, manager, student, two_question_quiz):
    q1, q2 = two_question_quiz.questions
    attempt = manager.start_attempt(student.id, two_question_quiz.id)
    manager.submit_attempt(student.id, two_question_quiz.id, attempt.id, [SubmittedAnswer(q1.id, correct_option_id(q1))])

    # The loser read the attempt while it was still open.
    monkeypatch.setattr(QuizAttempt, "is_open", property(lambda self: True))

    with pytest.raises(AlreadySubmitted):
        manager.submit_attempt(student.id, two_question_quiz.id, attempt.id, [
            SubmittedAnswer(q1.id, correct_option_id(q1)),
            SubmittedAnswer(q2.id, correct_option_id(q2)),
        ])

    monkeypatch.undo()
    stored = QuizAttempt.query.one()
    assert stored.score == 50
    assert stored.state == "CLOSED"
    assert QuizAnswer.query.count() == 1
