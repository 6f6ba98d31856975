"""
Document store access.

Collection paths are tuples of segments, e.g. ``("surveys",)`` or
``("surveys", survey_id, "responses")``. Nested collections keep a reference
to the document they hang off, so the same logical layout works on stores
without real subcollections.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError

from survey_backend import config
from survey_backend.errors import DuplicateDocument, TransportFailure

logger = logging.getLogger(__name__)

CollectionPath = Tuple[str, ...]
Filters = Sequence[Tuple[str, Any]]

PARENT_FIELD = "_parent"


def split_path(path: CollectionPath) -> Tuple[str, Optional[str]]:
    """
    Map a collection path onto (flat collection name, parent document path).

    ("surveys",)                   -> ("surveys", None)
    ("surveys", "s1", "responses") -> ("surveys.responses", "surveys/s1")
    """
    if not path or len(path) % 2 == 0:
        raise ValueError(f"Not a collection path: {path!r}")
    name = ".".join(path[0::2])
    parent = "/".join(path[:-1]) if len(path) > 1 else None
    return name, parent


def convert_object_ids(obj):
    if isinstance(obj, dict):
        return {k: convert_object_ids(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [convert_object_ids(i) for i in obj]
    elif isinstance(obj, ObjectId):
        return str(obj)
    return obj


class DocumentStore(ABC):
    """The four operations the survey services need from a document database."""

    @abstractmethod
    def get_by_id(self, path: CollectionPath, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def query(self, path: CollectionPath, filters: Filters) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def insert(self, path: CollectionPath, document: Dict[str, Any]) -> str:
        ...

    @abstractmethod
    def list_all(self, path: CollectionPath) -> List[Dict[str, Any]]:
        ...

    def ensure_unique(self, path: CollectionPath, fields: Iterable[str]) -> None:
        """Declare a uniqueness constraint. Stores without one accept duplicates."""


class MongoDocumentStore(DocumentStore):
    def __init__(self, db):
        self.db = db

    @classmethod
    def from_env(cls) -> "MongoDocumentStore":
        client = MongoClient(config.require("MONGO_URL"))
        return cls(client[config.require("MONGO_DB")])

    def _collection(self, path: CollectionPath):
        name, parent = split_path(path)
        return self.db[name], parent

    @staticmethod
    def _to_document(raw: Dict[str, Any]) -> Dict[str, Any]:
        doc = convert_object_ids(raw)
        doc["id"] = doc.pop("_id")
        doc.pop(PARENT_FIELD, None)
        return doc

    def get_by_id(self, path, doc_id):
        col, parent = self._collection(path)
        query: Dict[str, Any] = {"_id": doc_id}
        if parent:
            query[PARENT_FIELD] = parent
        try:
            raw = col.find_one(query)
            # Documents created outside this service carry ObjectId keys.
            if raw is None and ObjectId.is_valid(doc_id):
                query["_id"] = ObjectId(doc_id)
                raw = col.find_one(query)
        except PyMongoError as e:
            logger.exception("get_by_id failed on %s/%s", "/".join(path), doc_id)
            raise TransportFailure(str(e)) from e
        return self._to_document(raw) if raw else None

    def query(self, path, filters):
        col, parent = self._collection(path)
        query: Dict[str, Any] = dict(filters)
        if parent:
            query[PARENT_FIELD] = parent
        try:
            return [self._to_document(d) for d in col.find(query)]
        except PyMongoError as e:
            logger.exception("query failed on %s", "/".join(path))
            raise TransportFailure(str(e)) from e

    def insert(self, path, document):
        col, parent = self._collection(path)
        doc = {k: v for k, v in document.items() if k != "id"}
        doc["_id"] = str(ObjectId())
        if parent:
            doc[PARENT_FIELD] = parent
        try:
            col.insert_one(doc)
        except DuplicateKeyError as e:
            raise DuplicateDocument(str(e)) from e
        except PyMongoError as e:
            logger.exception("insert failed on %s", "/".join(path))
            raise TransportFailure(str(e)) from e
        return doc["_id"]

    def list_all(self, path):
        return self.query(path, [])

    def ensure_unique(self, path, fields):
        col, parent = self._collection(path)
        keys = [(f, ASCENDING) for f in fields]
        if parent:
            keys.insert(0, (PARENT_FIELD, ASCENDING))
        try:
            col.create_index(keys, unique=True)
        except PyMongoError as e:
            logger.exception("could not create unique index on %s", "/".join(path))
            raise TransportFailure(str(e)) from e
