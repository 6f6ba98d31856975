class SurveyError(Exception):
    """Base class for failures surfaced by the survey services."""


class NotFound(SurveyError):
    pass


class AlreadyResponded(SurveyError):
    """The user already has a stored response for this survey."""

    def __init__(self, survey_id: str, user_id: str):
        super().__init__(f"User {user_id} already responded to survey {survey_id}")
        self.survey_id = survey_id
        self.user_id = user_id


class TransportFailure(SurveyError):
    """A document store call failed (network, permission or serialization)."""


class InvalidAnswer(SurveyError):
    def __init__(self, question_id: str, reason: str):
        super().__init__(f"Invalid answer for question {question_id}: {reason}")
        self.question_id = question_id
        self.reason = reason


class DuplicateDocument(SurveyError):
    """An insert collided with a unique index."""
