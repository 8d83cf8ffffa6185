from classes.errors import ValidationError
from classes.quiz_scoring import SubmittedAnswer


def validate_id(field_name, value):
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer.")


def validate_answers(raw_answers):
    """Turn a request's answer list into SubmittedAnswer records."""
    if raw_answers is None:
        return []
    if not isinstance(raw_answers, list):
        raise ValidationError("Answers must be a list.")

    answers = []
    for raw in raw_answers:
        if not isinstance(raw, dict):
            raise ValidationError("Each answer must be an object.")
        if "question_id" not in raw or "option_id" not in raw:
            raise ValidationError("Each answer must have 'question_id' and 'option_id'.")
        answers.append(SubmittedAnswer(
            question_id=validate_id("question_id", raw["question_id"]),
            option_id=validate_id("option_id", raw["option_id"]),
        ))
    return answers
