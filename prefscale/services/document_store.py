"""
Document store abstraction.

Two implementations share the DocumentStore protocol:

- JsonDocumentStore: one JSON file per collection under a data directory,
  written atomically. Used for local runs and tests.
- MongoDocumentStore: MongoDB through pymongo, used when MONGO_URI is set.

Documents are plain dicts with a string "id" plus store-managed
"created_at"/"updated_at" ISO timestamps. Filters support field equality,
"$or" over sub-filters and {"field": {"$exists": bool}}.
"""

from __future__ import annotations

import json
import shutil
import tempfile
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Set

from pymongo import DESCENDING, MongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError
from bson import ObjectId
from bson.errors import InvalidId

from prefscale.utils.exceptions import DocumentConflict, StorageUnavailable
from prefscale.utils.logger import get_logger

logger = get_logger(__name__)

Document = Dict[str, Any]


class DocumentStore(Protocol):
    """Operations the services need from document persistence."""

    def create(self, collection: str, fields: Document) -> Document:
        ...

    def find(self, collection: str, filter: Optional[Document] = None) -> List[Document]:
        """Matching documents, newest first."""
        ...

    def find_one(self, collection: str, filter: Document) -> Optional[Document]:
        ...

    def find_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        ...

    def delete_by_id(self, collection: str, doc_id: str) -> bool:
        ...

    def ensure_unique(self, collection: str, field: str) -> None:
        ...


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def matches(document: Document, filter: Optional[Document]) -> bool:
    """Evaluate the supported filter subset against one document."""
    if not filter:
        return True
    for key, expected in filter.items():
        if key == "$or":
            if not any(matches(document, sub) for sub in expected):
                return False
        elif isinstance(expected, dict) and "$exists" in expected:
            if (key in document) != bool(expected["$exists"]):
                return False
        elif document.get(key) != expected:
            return False
    return True


class JsonDocumentStore:
    """JSON-file-backed store: <data_dir>/<collection>.json"""

    def __init__(self, data_dir: str = "data"):
        self.data_dir = Path(data_dir)
        self._lock = threading.Lock()
        self._unique: Dict[str, Set[str]] = {}

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _load(self, collection: str) -> List[Document]:
        path = self._path(collection)
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to read collection", collection=collection, error=str(e))
            raise StorageUnavailable(f"Failed to read {collection}")
        return data.get("documents", [])

    def _atomic_write(self, collection: str, documents: List[Document]) -> None:
        path = self._path(collection)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w", dir=str(path.parent), delete=False, encoding="utf-8"
            ) as tf:
                json.dump({"documents": documents}, tf, indent=2, ensure_ascii=False)
                temp_path = Path(tf.name)
        except OSError as e:
            logger.error("Failed to write collection", collection=collection, error=str(e))
            raise StorageUnavailable(f"Failed to write {collection}")

        try:
            shutil.move(str(temp_path), str(path))
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            logger.error("Failed to write collection", collection=collection, error=str(e))
            raise StorageUnavailable(f"Failed to write {collection}")

    def ensure_unique(self, collection: str, field: str) -> None:
        self._unique.setdefault(collection, set()).add(field)

    def create(self, collection: str, fields: Document) -> Document:
        with self._lock:
            documents = self._load(collection)
            for field in self._unique.get(collection, ()):
                value = fields.get(field)
                if value is not None and any(d.get(field) == value for d in documents):
                    raise DocumentConflict(collection, field, str(value))

            timestamp = _now()
            document = dict(fields)
            document.update(id=uuid.uuid4().hex, created_at=timestamp, updated_at=timestamp)
            documents.append(document)
            self._atomic_write(collection, documents)
        return dict(document)

    def find(self, collection: str, filter: Optional[Document] = None) -> List[Document]:
        # Reverse first so documents with identical timestamps stay newest first.
        documents = [dict(d) for d in reversed(self._load(collection)) if matches(d, filter)]
        documents.sort(key=lambda d: d.get("created_at", ""), reverse=True)
        return documents

    def find_one(self, collection: str, filter: Document) -> Optional[Document]:
        for document in self._load(collection):
            if matches(document, filter):
                return dict(document)
        return None

    def find_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        return self.find_one(collection, {"id": doc_id})

    def delete_by_id(self, collection: str, doc_id: str) -> bool:
        with self._lock:
            documents = self._load(collection)
            remaining = [d for d in documents if d.get("id") != doc_id]
            if len(remaining) == len(documents):
                return False
            self._atomic_write(collection, remaining)
        return True


# Field names written by the previous backend (camelCase timestamps and the
# bare "password" hash), read as their current names.
LEGACY_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "fileUrl": "file_url",
    "publicId": "public_id",
    "uploadedBy": "uploaded_by",
    "password": "password_hash",
}


class MongoDocumentStore:
    """MongoDB-backed store. "_id" ObjectIds are exposed as string "id"."""

    def __init__(self, uri: str, database: str = "prefscale", client: Optional[MongoClient] = None):
        self._client = client or MongoClient(
            uri,
            maxPoolSize=10,
            minPoolSize=2,
            serverSelectionTimeoutMS=5000,
            socketTimeoutMS=45000,
            tz_aware=True,
        )
        self._db = self._client[database]

    @staticmethod
    def _to_document(raw: Optional[Document]) -> Optional[Document]:
        if raw is None:
            return None
        document = dict(raw)
        document["id"] = str(document.pop("_id"))
        document.pop("__v", None)
        for old, new in LEGACY_FIELDS.items():
            if old in document:
                value = document.pop(old)
                document.setdefault(new, value)
        for key in ("created_at", "updated_at"):
            value = document.get(key)
            if isinstance(value, datetime):
                document[key] = value.isoformat()
        return document

    @staticmethod
    def _object_id(doc_id: str) -> Optional[ObjectId]:
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            return None

    def ensure_unique(self, collection: str, field: str) -> None:
        try:
            self._db[collection].create_index(field, unique=True)
        except PyMongoError as e:
            logger.error("Failed to create index", collection=collection, field=field, error=str(e))
            raise StorageUnavailable(f"Failed to index {collection}")

    def create(self, collection: str, fields: Document) -> Document:
        timestamp = datetime.now(timezone.utc)
        raw = dict(fields)
        raw.update(created_at=timestamp, updated_at=timestamp)
        try:
            result = self._db[collection].insert_one(raw)
        except DuplicateKeyError as e:
            key_value = (e.details or {}).get("keyValue") or {}
            field, value = next(iter(key_value.items()), ("key", ""))
            raise DocumentConflict(collection, field, str(value))
        except PyMongoError as e:
            logger.error("Insert failed", collection=collection, error=str(e))
            raise StorageUnavailable(f"Failed to write {collection}")
        raw["_id"] = result.inserted_id
        return self._to_document(raw)

    def find(self, collection: str, filter: Optional[Document] = None) -> List[Document]:
        try:
            cursor = self._db[collection].find(self._translate(filter or {})).sort(
                [("created_at", DESCENDING), ("createdAt", DESCENDING)]
            )
            return [self._to_document(raw) for raw in cursor]
        except PyMongoError as e:
            logger.error("Query failed", collection=collection, error=str(e))
            raise StorageUnavailable(f"Failed to read {collection}")

    def find_one(self, collection: str, filter: Document) -> Optional[Document]:
        try:
            return self._to_document(self._db[collection].find_one(self._translate(filter)))
        except PyMongoError as e:
            logger.error("Query failed", collection=collection, error=str(e))
            raise StorageUnavailable(f"Failed to read {collection}")

    def find_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        object_id = self._object_id(doc_id)
        if object_id is None:
            return None
        return self.find_one(collection, {"_id": object_id})

    def delete_by_id(self, collection: str, doc_id: str) -> bool:
        object_id = self._object_id(doc_id)
        if object_id is None:
            return False
        try:
            return self._db[collection].delete_one({"_id": object_id}).deleted_count == 1
        except PyMongoError as e:
            logger.error("Delete failed", collection=collection, error=str(e))
            raise StorageUnavailable(f"Failed to delete from {collection}")

    def _translate(self, filter: Document) -> Document:
        """Map the public "id" key onto Mongo's "_id"."""
        translated: Document = {}
        for key, value in filter.items():
            if key == "$or":
                translated[key] = [self._translate(sub) for sub in value]
            elif key == "id":
                translated["_id"] = self._object_id(value)
            else:
                translated[key] = value
        return translated

    def close(self) -> None:
        self._client.close()
