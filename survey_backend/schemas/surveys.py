# schemas/surveys.py
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

AnswerValue = Union[bool, int, float, str, List[str]]

# Sort key for questions stored without a creation timestamp.
NEVER = datetime.max.replace(tzinfo=timezone.utc)


def _aware(v: Optional[datetime]) -> Optional[datetime]:
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v


def _first(doc: Dict[str, Any], *keys: str) -> Any:
    for k in keys:
        v = doc.get(k)
        if v not in (None, ""):
            return v
    return None


class DocumentModel(BaseModel):
    """Stored documents use camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude={"id"}, exclude_none=True)


class QuestionType(str, Enum):
    text = "text"
    multiple_choice = "multipleChoice"
    choice = "choice"
    yes_no = "yesNo"
    boolean = "boolean"
    rating = "rating"
    comment = "comment"
    date = "date"


class Survey(DocumentModel):
    id: str
    user_id: str
    title: str = "Untitled Survey"
    description: Optional[str] = None
    group_id: str = ""
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    status: Literal["draft", "published", "closed"] = "draft"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("start_date", "end_date", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v):
        return _aware(v)

    def accepting_responses(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        if self.status != "published" or self.is_active is False:
            return False
        if self.start_date and now < self.start_date:
            return False
        if self.end_date and now > self.end_date:
            return False
        return True


class Question(DocumentModel):
    id: str
    type: QuestionType = QuestionType.text
    question: str = ""
    required: bool = False
    options: Optional[List[str]] = None
    max_rating: Optional[int] = None
    min_date: Optional[str] = None
    max_date: Optional[str] = None
    created_at: Optional[datetime] = None

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, v):
        return _aware(v)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Question":
        """
        Build the canonical question from a stored document.

        Older documents name the same fields differently (questionType,
        text/questionText, choices, ratingMax); they are mapped here and
        nowhere else. Unknown types fall back to free text.
        """
        raw_type = _first(doc, "type", "questionType") or QuestionType.text.value
        try:
            qtype = QuestionType(raw_type)
        except ValueError:
            qtype = QuestionType.text
        return cls(
            id=str(doc["id"]),
            type=qtype,
            question=_first(doc, "question", "text", "questionText") or "",
            required=bool(doc.get("required") or False),
            options=_first(doc, "options", "choices"),
            max_rating=_first(doc, "maxRating", "ratingMax"),
            min_date=doc.get("minDate"),
            max_date=doc.get("maxDate"),
            created_at=doc.get("createdAt"),
        )

    def sort_key(self):
        numeric = int(self.id) if self.id.isdigit() else 0
        return (self.created_at or NEVER, numeric, self.id)


def questions_from_documents(docs: Iterable[Dict[str, Any]]) -> List[Question]:
    """Normalize question documents, expanding legacy documents that hold a `questions` array."""
    out: List[Question] = []
    for doc in docs:
        nested = doc.get("questions")
        if isinstance(nested, list) and not _first(doc, "type", "questionType", "question", "text"):
            for idx, item in enumerate(nested):
                item = dict(item)
                item.setdefault("id", f"{doc['id']}-{idx}")
                item.setdefault("createdAt", doc.get("createdAt"))
                out.append(Question.from_document(item))
        else:
            out.append(Question.from_document(doc))
    out.sort(key=Question.sort_key)
    return out


class Answer(DocumentModel):
    question_id: str
    value: AnswerValue


class SurveyResponse(DocumentModel):
    id: Optional[str] = None
    user_id: str
    survey_id: str
    student_id: str
    answers: List[Answer] = Field(default_factory=list)
    submitted_at: datetime
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("submitted_at", "created_at", "updated_at")
    @classmethod
    def ensure_utc(cls, v):
        return _aware(v)

    def answer_for(self, question_id: str) -> Optional[Answer]:
        return next((a for a in self.answers if a.question_id == question_id), None)


class Student(DocumentModel):
    id: Optional[str] = None
    user_id: str
    first_name: str
    last_name: str
    group_id: str
    birth_date: Optional[str] = None
    parent_name: Optional[str] = None
    parent_email: Optional[str] = None
    parent_phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# API payloads

class SubmitResponseIn(DocumentModel):
    answers: Dict[str, AnswerValue]
    # Placeholder kept when no student can be resolved; defaults to the submitter.
    student_id: Optional[str] = None


class SubmitResponseOut(DocumentModel):
    response_id: str
    student_id: str


class SurveyView(DocumentModel):
    survey: Survey
    questions: List[Question]
    accepting_responses: bool
    already_responded: bool


class QuestionStat(DocumentModel):
    responses: int = 0
    values: List[Any] = Field(default_factory=list)


class SurveyStats(DocumentModel):
    total_responses: int
    per_question: Dict[str, QuestionStat] = Field(default_factory=dict)


class SurveyCount(DocumentModel):
    id: str
    title: str
    response_count: int


class UserAnalytics(DocumentModel):
    total_surveys: int
    total_responses: int
    average_responses_per_survey: float
    per_survey: List[SurveyCount] = Field(default_factory=list)
