import copy
import os
import uuid
from datetime import datetime, timedelta, timezone

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient

from survey_backend.auth import get_current_user
from survey_backend.dependencies import get_repository
from survey_backend.documents import DocumentStore, split_path
from survey_backend.errors import DuplicateDocument, TransportFailure
from survey_backend.main import app
from survey_backend.schemas import Identity
from survey_backend.services.repository import SURVEYS, SurveyRepository, questions_path

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class InMemoryStore(DocumentStore):
    def __init__(self):
        self.collections = {}
        self.unique = {}
        self.calls = []

    def _docs(self, path):
        name, parent = split_path(path)
        return name, parent, self.collections.setdefault(name, [])

    def get_by_id(self, path, doc_id):
        self.calls.append(("get_by_id", path))
        _, parent, docs = self._docs(path)
        for d in docs:
            if d["id"] == doc_id and d["_parent"] == parent:
                return self._public(d)
        return None

    def query(self, path, filters):
        self.calls.append(("query", path))
        _, parent, docs = self._docs(path)
        return [
            self._public(d) for d in docs
            if d["_parent"] == parent and all(d.get(k) == v for k, v in filters)
        ]

    def insert(self, path, document):
        self.calls.append(("insert", path))
        name, parent, docs = self._docs(path)
        for fields in self.unique.get(name, []):
            key = [document.get(f) for f in fields]
            if any(d["_parent"] == parent and [d.get(f) for f in fields] == key for d in docs):
                raise DuplicateDocument(f"{name} {fields}")
        doc = copy.deepcopy(document)
        doc["id"] = uuid.uuid4().hex
        doc["_parent"] = parent
        docs.append(doc)
        return doc["id"]

    def list_all(self, path):
        return self.query(path, [])

    def ensure_unique(self, path, fields):
        name, _ = split_path(path)
        self.unique.setdefault(name, []).append(list(fields))

    @staticmethod
    def _public(doc):
        out = copy.deepcopy(doc)
        out.pop("_parent")
        return out

    def count(self, path):
        return len(self.list_all(path))


class FailingStore(InMemoryStore):
    """Fails every call on the collections named in `broken`."""

    def __init__(self, broken):
        super().__init__()
        self.broken = set(broken)

    def _check(self, path):
        if split_path(path)[0] in self.broken:
            raise TransportFailure(f"{path} unavailable")

    def get_by_id(self, path, doc_id):
        self._check(path)
        return super().get_by_id(path, doc_id)

    def query(self, path, filters):
        self._check(path)
        return super().query(path, filters)

    def insert(self, path, document):
        self._check(path)
        return super().insert(path, document)


def add_survey(store, owner="creator-1", group="G1", title="Class feedback", created_at=T0, **fields):
    doc = {
        "userId": owner,
        "title": title,
        "groupId": group,
        "status": "published",
        "createdAt": created_at.isoformat(),
        **fields,
    }
    return store.insert(SURVEYS, doc)


def add_question(store, survey_id, prompt, qtype="text", minutes=0, **fields):
    doc = {
        "type": qtype,
        "question": prompt,
        "required": True,
        "createdAt": (T0 + timedelta(minutes=minutes)).isoformat(),
        **fields,
    }
    return store.insert(questions_path(survey_id), doc)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def repo(store):
    r = SurveyRepository(store)
    r.ensure_indexes()
    return r


@pytest.fixture
def user():
    return Identity(id="U1", email="u1@example.com", display_name="User One")


@pytest.fixture
def client(repo, user):
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_current_user] = lambda: user
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()
