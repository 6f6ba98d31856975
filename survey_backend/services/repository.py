# services/repository.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from survey_backend.documents import DocumentStore
from survey_backend.errors import TransportFailure
from survey_backend.schemas import Question, Student, Survey, SurveyResponse, questions_from_documents

logger = logging.getLogger(__name__)

SURVEYS = ("surveys",)
STUDENTS = ("students",)
ANY = "*"

Model = TypeVar("Model", bound=BaseModel)


def questions_path(survey_id: str):
    return ("surveys", survey_id, "questions")


def responses_path(survey_id: str):
    return ("surveys", survey_id, "responses")


def _load(model: Type[Model], doc: Dict[str, Any]) -> Model:
    """Validate a stored document; malformed data counts as a store failure."""
    try:
        return model.model_validate(doc)
    except ValidationError as e:
        logger.error("Malformed %s document %s: %s", model.__name__, doc.get("id"), e)
        raise TransportFailure(f"Malformed {model.__name__} document {doc.get('id')}") from e


class SurveyRepository:
    """Logical collection layout over a DocumentStore."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def ensure_indexes(self) -> None:
        # One response per user per survey, one student per name and group.
        # Existing duplicates block an index; the read-before-write checks still apply.
        for path, fields in (
            (responses_path(ANY), ["userId"]),
            (STUDENTS, ["firstName", "lastName", "groupId"]),
        ):
            try:
                self.store.ensure_unique(path, fields)
            except TransportFailure as e:
                logger.warning("No unique index on %s (%s): %s", "/".join(path), ", ".join(fields), e)

    # Surveys

    def get_survey(self, survey_id: str) -> Optional[Survey]:
        doc = self.store.get_by_id(SURVEYS, survey_id)
        if doc is None:
            return None
        return _load(Survey, doc)

    def get_survey_questions(self, survey_id: str) -> List[Question]:
        docs = self.store.list_all(questions_path(survey_id))
        try:
            questions = questions_from_documents(docs)
        except ValidationError as e:
            logger.error("Malformed question documents for survey %s: %s", survey_id, e)
            raise TransportFailure(f"Malformed questions for survey {survey_id}") from e
        logger.debug("Loaded %d questions for survey %s", len(questions), survey_id)
        return questions

    def get_user_surveys(self, user_id: str) -> List[Survey]:
        docs = self.store.query(SURVEYS, [("userId", user_id)])
        surveys = [_load(Survey, d) for d in docs]
        return sorted(surveys, key=lambda s: s.created_at.timestamp() if s.created_at else 0, reverse=True)

    # Responses

    def has_user_responded(self, survey_id: str, user_id: str) -> bool:
        return bool(self.store.query(responses_path(survey_id), [("userId", user_id)]))

    def save_response(self, response: SurveyResponse) -> str:
        return self.store.insert(responses_path(response.survey_id), response.to_document())

    def get_survey_responses(self, survey_id: str) -> List[SurveyResponse]:
        docs = self.store.list_all(responses_path(survey_id))
        responses = [_load(SurveyResponse, d) for d in docs]
        return sorted(responses, key=lambda r: r.submitted_at, reverse=True)

    # Students

    def find_student(self, first_name: str, last_name: str, group_id: str) -> Optional[Student]:
        docs = self.store.query(
            STUDENTS,
            [("firstName", first_name), ("lastName", last_name), ("groupId", group_id)],
        )
        return _load(Student, docs[0]) if docs else None

    def insert_student(self, student: Student) -> str:
        """Insert and return the new id; raises DuplicateDocument if the name is taken."""
        return self.store.insert(STUDENTS, student.to_document())
