import pytest

from classes.errors import ValidationError
from classes.quiz_scoring import (
    OptionDefinition,
    QuestionDefinition,
    QuizDefinition,
    SubmittedAnswer,
    relevant_answers,
    score_quiz,
)
from classes.validators import validate_answers
from utils.rounding import percentage


def question(qid, correct=None, points=1):
    options = tuple(OptionDefinition(id=qid * 10 + i, is_correct=(i == correct)) for i in range(3))
    return QuestionDefinition(id=qid, points=points, options=options)


def quiz(*questions, passing_score=70):
    return QuizDefinition(id=1, passing_score=passing_score, questions=tuple(questions))


def test_one_right_one_wrong_scores_fifty_and_fails_at_seventy():
    q = quiz(question(1, correct=0), question(2, correct=1))

    result = score_quiz(q, [SubmittedAnswer(1, 10), SubmittedAnswer(2, 22)])

    assert result.score == 50
    assert result.passed is False
    assert result.correct_count == 1
    assert result.total_questions == 2
    assert result.correctness == {1: True, 2: False}


def test_all_correct_scores_hundred_and_passes():
    q = quiz(question(1, correct=0), question(2, correct=2), question(3, correct=1))

    result = score_quiz(q, [SubmittedAnswer(1, 10), SubmittedAnswer(2, 22), SubmittedAnswer(3, 31)])

    assert result.score == 100
    assert result.passed is True
    assert result.correct_count == 3 == result.total_questions


def test_question_without_correct_option_counts_towards_total_but_never_earns():
    q = quiz(question(1, correct=0), question(2, correct=None))

    result = score_quiz(q, [SubmittedAnswer(1, 10), SubmittedAnswer(2, 20)])

    assert result.score == 50
    assert result.correctness[2] is False


def test_points_weight_the_score():
    q = quiz(question(1, correct=0, points=3), question(2, correct=0, points=1))

    result = score_quiz(q, [SubmittedAnswer(1, 10), SubmittedAnswer(2, 21)])

    assert result.score == 75
    assert result.passed is True


def test_answers_for_unknown_questions_are_ignored():
    q = quiz(question(1, correct=0))
    answers = [SubmittedAnswer(1, 10), SubmittedAnswer(99, 990)]

    result = score_quiz(q, answers)

    assert result.score == 100
    assert relevant_answers(q, answers) == [SubmittedAnswer(1, 10)]


def test_unanswered_questions_are_wrong():
    q = quiz(question(1, correct=0), question(2, correct=0))

    result = score_quiz(q, [])

    assert result.score == 0
    assert result.correct_count == 0


def test_quiz_without_questions_scores_zero():
    result = score_quiz(quiz(passing_score=0), [])

    assert result.score == 0
    assert result.total_questions == 0
    assert result.passed is True


def test_duplicate_answers_for_a_question_are_rejected():
    q = quiz(question(1, correct=0))

    with pytest.raises(ValidationError) as excinfo:
        score_quiz(q, [SubmittedAnswer(1, 10), SubmittedAnswer(1, 11)])

    assert excinfo.value.details == {"question_id": 1}


def test_passing_score_is_inclusive():
    q = quiz(question(1, correct=0), question(2, correct=0), passing_score=50)

    result = score_quiz(q, [SubmittedAnswer(1, 10)])

    assert result.score == 50
    assert result.passed is True


@pytest.mark.parametrize("part, whole, expected", [
    (1, 8, 13),
    (1, 3, 33),
    (2, 3, 67),
    (0, 5, 0),
    (5, 5, 100),
    (3, 0, 0),
])
def test_percentage_rounds_halves_up(part, whole, expected):
    assert percentage(part, whole) == expected


def test_validate_answers_builds_records():
    answers = validate_answers([{"question_id": "4", "option_id": 7}])

    assert answers == [SubmittedAnswer(4, 7)]


@pytest.mark.parametrize("payload", [
    "not a list",
    [{"question_id": 1}],
    [{"question_id": "x", "option_id": 1}],
    [{"question_id": True, "option_id": 1}],
    [3],
])
def test_validate_answers_rejects_malformed_payloads(payload):
    with pytest.raises(ValidationError):
        validate_answers(payload)
