# services/ingestion.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple

from survey_backend import config
from survey_backend.errors import AlreadyResponded, DuplicateDocument, NotFound, SurveyError
from survey_backend.schemas import Answer, AnswerValue, SurveyResponse
from survey_backend.services.repository import SurveyRepository
from survey_backend.services.students import resolve_student
from survey_backend.services.validation import check_answers

logger = logging.getLogger(__name__)


def submit_response(
    repo: SurveyRepository,
    raw_answers: Dict[str, AnswerValue],
    survey_id: str,
    user_id: str,
    student_id: Optional[str] = None,
    strict: Optional[bool] = None,
) -> Tuple[str, str]:
    """
    Store one user's answers to a survey and return (response id, student id).

    Raises NotFound when the survey does not exist, AlreadyResponded when the
    user already answered it, and TransportFailure when the store fails.
    Nothing is written in any of those cases, except that a student created
    during resolution is kept if the response write itself then fails.
    """
    survey = repo.get_survey(survey_id)
    if survey is None:
        raise NotFound(f"Survey {survey_id} not found")

    if repo.has_user_responded(survey_id, user_id):
        raise AlreadyResponded(survey_id, user_id)

    questions = repo.get_survey_questions(survey_id)
    if strict is None:
        strict = config.STRICT_ANSWERS
    if strict:
        check_answers(questions, raw_answers)

    now = datetime.now(timezone.utc)
    response = SurveyResponse(
        user_id=user_id,
        survey_id=survey_id,
        # The submitter stands in for the student until one is resolved.
        student_id=student_id or user_id,
        answers=[Answer(question_id=qid, value=value) for qid, value in raw_answers.items()],
        submitted_at=now,
        created_at=now,
        updated_at=now,
    )

    try:
        resolved = resolve_student(repo, response, questions, survey.group_id, survey.user_id)
    except SurveyError as e:
        logger.warning("Student resolution skipped for survey %s: %s", survey_id, e)
        resolved = None
    if resolved:
        response.student_id = resolved

    try:
        response_id = repo.save_response(response)
    except DuplicateDocument:
        raise AlreadyResponded(survey_id, user_id)
    logger.info("Saved response %s for survey %s (student %s)", response_id, survey_id, response.student_id)
    return response_id, response.student_id
