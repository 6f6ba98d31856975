# services/students.py
"""
Infer a student from a name-like answer and deduplicate it within a group.

The first free-text question (by creation time) whose prompt mentions a name
is authoritative. Its answer is split on whitespace: the first token is the
first name, the rest the last name. Names are compared exactly, so case or
accent differences produce different students.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from survey_backend.errors import DuplicateDocument
from survey_backend.schemas import Question, QuestionType, Student, SurveyResponse
from survey_backend.schemas.surveys import NEVER
from survey_backend.services.repository import SurveyRepository

logger = logging.getLogger(__name__)

NAME_TOKENS = ("name", "nombre", "nome", "prénom")


def is_name_question(question: Question) -> bool:
    if question.type != QuestionType.text:
        return False
    prompt = question.question.casefold()
    return any(token in prompt for token in NAME_TOKENS)


def find_name_question(questions: Sequence[Question]) -> Optional[Question]:
    """Earliest-created name question; ties keep the original order."""
    candidates = [(i, q) for i, q in enumerate(questions) if is_name_question(q)]
    if not candidates:
        return None
    _, question = min(candidates, key=lambda c: (c[1].created_at or NEVER, c[0]))
    return question


def parse_full_name(raw: str) -> Optional[Tuple[str, str]]:
    tokens = raw.split()
    if not tokens:
        return None
    return tokens[0], " ".join(tokens[1:])


def extract_name(response: SurveyResponse, questions: Sequence[Question]) -> Optional[Tuple[str, str]]:
    question = find_name_question(questions)
    if question is None:
        return None
    answer = response.answer_for(question.id)
    if answer is None or not isinstance(answer.value, str):
        return None
    return parse_full_name(answer.value)


def resolve_student(
    repo: SurveyRepository,
    response: SurveyResponse,
    questions: List[Question],
    group_id: str,
    survey_creator_id: str,
) -> Optional[str]:
    """
    Return the id of the student named in `response`, creating the student
    (owned by the survey creator) when none exists in `group_id` yet.
    Returns None when the response names nobody.
    """
    name = extract_name(response, questions)
    if name is None:
        return None
    first_name, last_name = name

    existing = repo.find_student(first_name, last_name, group_id)
    if existing is not None:
        return existing.id

    now = datetime.now(timezone.utc)
    student = Student(
        user_id=survey_creator_id,
        first_name=first_name,
        last_name=last_name,
        group_id=group_id,
        created_at=now,
        updated_at=now,
    )
    try:
        student_id = repo.insert_student(student)
    except DuplicateDocument:
        # Another submission created the same student between lookup and insert.
        winner = repo.find_student(first_name, last_name, group_id)
        if winner is None:
            raise
        return winner.id
    logger.info("Created student %s (%s %s) in group %s", student_id, first_name, last_name, group_id)
    return student_id
