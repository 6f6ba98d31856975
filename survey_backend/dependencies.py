from functools import lru_cache

from survey_backend.documents import DocumentStore, MongoDocumentStore
from survey_backend.services.repository import SurveyRepository


@lru_cache
def get_store() -> DocumentStore:
    return MongoDocumentStore.from_env()


def get_repository() -> SurveyRepository:
    return SurveyRepository(get_store())
