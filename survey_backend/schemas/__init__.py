from .user import Identity, TokenOut, UserCreate, UserOut
from .surveys import (
    Answer,
    AnswerValue,
    Question,
    QuestionStat,
    QuestionType,
    Student,
    SubmitResponseIn,
    SubmitResponseOut,
    Survey,
    SurveyCount,
    SurveyResponse,
    SurveyStats,
    SurveyView,
    UserAnalytics,
    questions_from_documents,
)

__all__ = [
    "Answer",
    "AnswerValue",
    "Identity",
    "Question",
    "QuestionStat",
    "QuestionType",
    "Student",
    "SubmitResponseIn",
    "SubmitResponseOut",
    "Survey",
    "SurveyCount",
    "SurveyResponse",
    "SurveyStats",
    "SurveyView",
    "TokenOut",
    "UserAnalytics",
    "UserCreate",
    "UserOut",
    "questions_from_documents",
]
