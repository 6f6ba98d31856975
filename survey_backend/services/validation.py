# services/validation.py
"""Type checks for answer values, applied when STRICT_ANSWERS is on."""
from __future__ import annotations

from datetime import date
from typing import Dict, Sequence

from survey_backend.errors import InvalidAnswer
from survey_backend.schemas import AnswerValue, Question, QuestionType

DEFAULT_MAX_RATING = 5
_YES_NO = ("yes", "no")


def _parse_date(value: str, question_id: str) -> date:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        raise InvalidAnswer(question_id, f"{value!r} is not an ISO date")


def check_answer(question: Question, value: AnswerValue) -> None:
    qid = question.id
    qtype = question.type

    if qtype in (QuestionType.text, QuestionType.comment):
        if not isinstance(value, str):
            raise InvalidAnswer(qid, "expected text")

    elif qtype in (QuestionType.choice, QuestionType.multiple_choice):
        picked = value if isinstance(value, list) else [value]
        if not all(isinstance(v, str) for v in picked):
            raise InvalidAnswer(qid, "expected one or more option labels")
        if question.options is not None:
            unknown = [v for v in picked if v not in question.options]
            if unknown:
                raise InvalidAnswer(qid, f"not an option: {', '.join(unknown)}")

    elif qtype == QuestionType.yes_no:
        if not isinstance(value, bool) and value not in _YES_NO:
            raise InvalidAnswer(qid, "expected yes or no")

    elif qtype == QuestionType.boolean:
        if not isinstance(value, bool):
            raise InvalidAnswer(qid, "expected true or false")

    elif qtype == QuestionType.rating:
        top = question.max_rating or DEFAULT_MAX_RATING
        if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= top:
            raise InvalidAnswer(qid, f"expected a whole number from 1 to {top}")

    elif qtype == QuestionType.date:
        if not isinstance(value, str):
            raise InvalidAnswer(qid, "expected a date")
        day = _parse_date(value, qid)
        if question.min_date and day < _parse_date(question.min_date, qid):
            raise InvalidAnswer(qid, f"before {question.min_date}")
        if question.max_date and day > _parse_date(question.max_date, qid):
            raise InvalidAnswer(qid, f"after {question.max_date}")


def check_answers(questions: Sequence[Question], answers: Dict[str, AnswerValue]) -> None:
    """Check every answer whose question is known; others pass through."""
    by_id = {q.id: q for q in questions}
    for question_id, value in answers.items():
        question = by_id.get(question_id)
        if question is not None:
            check_answer(question, value)
