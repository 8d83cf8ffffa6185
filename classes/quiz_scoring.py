"""
Quiz scoring.

Pure functions over plain records: no session, no clock. The attempt manager
converts the ORM quiz into a ``QuizDefinition`` and hands it here together
with the submitted answers.

Rules:

* every question contributes its ``points`` to the total, including a
  question with no option flagged correct (it can never be earned);
* an answer earns the question's points only when it picks the correct option;
* answers naming a question that is not part of the quiz are ignored;
* at most one answer per question, anything else is rejected by
  ``check_answers`` before scoring.
"""
from dataclasses import dataclass, field

from classes.errors import ValidationError
from utils.rounding import percentage


@dataclass(frozen=True)
class OptionDefinition:
    id: int
    is_correct: bool = False


@dataclass(frozen=True)
class QuestionDefinition:
    id: int
    points: int = 1
    options: tuple = ()

    @property
    def correct_option(self):
        for option in self.options:
            if option.is_correct:
                return option
        return None


@dataclass(frozen=True)
class QuizDefinition:
    id: int
    passing_score: int
    questions: tuple = ()


@dataclass(frozen=True)
class SubmittedAnswer:
    question_id: int
    option_id: int


@dataclass(frozen=True)
class ScoreResult:
    score: int
    passed: bool
    correct_count: int
    total_questions: int
    passing_score: int
    correctness: dict = field(default_factory=dict)

    def to_dict(self):
        return {
            "score": self.score,
            "passed": self.passed,
            "correct_count": self.correct_count,
            "total_questions": self.total_questions,
            "passing_score": self.passing_score,
            "correctness": {str(k): v for k, v in self.correctness.items()},
        }


def check_answers(answers):
    """Reject more than one answer for the same question."""
    seen = set()
    for answer in answers:
        if answer.question_id in seen:
            raise ValidationError(
                f"Duplicate answer for question {answer.question_id}",
                question_id=answer.question_id,
            )
        seen.add(answer.question_id)
    return answers


def relevant_answers(quiz, answers):
    """Answers that name a question of ``quiz``, in submission order."""
    question_ids = {q.id for q in quiz.questions}
    return [a for a in answers if a.question_id in question_ids]


def score_quiz(quiz, answers):
    check_answers(answers)
    by_question = {a.question_id: a for a in answers}

    total_points = 0
    earned = 0
    correct_count = 0
    correctness = {}

    for question in quiz.questions:
        total_points += question.points
        answer = by_question.get(question.id)
        correct_option = question.correct_option
        is_correct = (
            answer is not None
            and correct_option is not None
            and answer.option_id == correct_option.id
        )
        if is_correct:
            earned += question.points
            correct_count += 1
        correctness[question.id] = is_correct

    score = percentage(earned, total_points)
    return ScoreResult(
        score=score,
        passed=score >= quiz.passing_score,
        correct_count=correct_count,
        total_questions=len(quiz.questions),
        passing_score=quiz.passing_score,
        correctness=correctness,
    )
