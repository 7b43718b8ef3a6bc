"""Tests for the document stores"""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import DuplicateKeyError, ServerSelectionTimeoutError

from prefscale.models.blog import BlogSection
from prefscale.services.blob_store import InMemoryBlobStore
from prefscale.services.blog_service import BlogService
from prefscale.services.document_store import JsonDocumentStore, MongoDocumentStore, matches
from prefscale.utils.exceptions import DocumentConflict, StorageUnavailable


@pytest.fixture
def store(tmp_path):
    return JsonDocumentStore(str(tmp_path))


class TestMatches:
    def test_equality(self):
        assert matches({"a": 1}, {"a": 1})
        assert not matches({"a": 1}, {"a": 2})

    def test_exists(self):
        assert matches({}, {"section": {"$exists": False}})
        assert not matches({"section": "x"}, {"section": {"$exists": False}})
        assert matches({"section": "x"}, {"section": {"$exists": True}})

    def test_or(self):
        legacy = {"$or": [{"section": "resources"}, {"section": {"$exists": False}}]}
        assert matches({"section": "resources"}, legacy)
        assert matches({"title": "old"}, legacy)
        assert not matches({"section": "allblogs"}, legacy)

    def test_empty_filter_matches_everything(self):
        assert matches({"a": 1}, None)
        assert matches({"a": 1}, {})


class TestJsonDocumentStore:
    def test_create_assigns_id_and_timestamps(self, store, tmp_path):
        doc = store.create("things", {"name": "a"})
        assert doc["id"]
        assert doc["created_at"] == doc["updated_at"]
        on_disk = json.loads((tmp_path / "things.json").read_text(encoding="utf-8"))
        assert on_disk["documents"][0]["name"] == "a"

    def test_find_is_newest_first(self, store):
        for name in ("first", "second", "third"):
            store.create("things", {"name": name})
        assert [d["name"] for d in store.find("things")] == ["third", "second", "first"]

    def test_find_with_filter(self, store):
        store.create("things", {"kind": "x"})
        store.create("things", {"kind": "y"})
        assert [d["kind"] for d in store.find("things", {"kind": "y"})] == ["y"]

    def test_find_by_id_and_delete(self, store):
        doc = store.create("things", {"name": "a"})
        assert store.find_by_id("things", doc["id"])["name"] == "a"
        assert store.delete_by_id("things", doc["id"]) is True
        assert store.find_by_id("things", doc["id"]) is None
        assert store.delete_by_id("things", doc["id"]) is False

    def test_missing_collection_is_empty(self, store):
        assert store.find("nothing") == []
        assert store.find_one("nothing", {"a": 1}) is None

    def test_unique_field(self, store):
        store.ensure_unique("accounts", "email")
        store.create("accounts", {"email": "a@x.com"})
        with pytest.raises(DocumentConflict):
            store.create("accounts", {"email": "a@x.com"})
        store.create("accounts", {"email": "b@x.com"})

    def test_corrupt_file_is_storage_unavailable(self, store, tmp_path):
        (tmp_path / "things.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(StorageUnavailable):
            store.find("things")

    def test_returned_documents_are_copies(self, store):
        doc = store.create("things", {"name": "a"})
        doc["name"] = "mutated"
        assert store.find_by_id("things", doc["id"])["name"] == "a"


class TestMongoDocumentStore:
    @pytest.fixture
    def collection(self):
        return MagicMock()

    @pytest.fixture
    def mongo(self, collection):
        client = MagicMock()
        client.__getitem__.return_value.__getitem__.return_value = collection
        return MongoDocumentStore("mongodb://unused", client=client)

    def test_create_maps_object_id(self, mongo, collection):
        oid = ObjectId()
        collection.insert_one.return_value.inserted_id = oid
        doc = mongo.create("blogs", {"title": "t"})
        assert doc["id"] == str(oid)
        assert "_id" not in doc
        assert isinstance(doc["created_at"], str)

    def test_duplicate_key_becomes_conflict(self, mongo, collection):
        collection.insert_one.side_effect = DuplicateKeyError(
            "dup", 11000, {"keyValue": {"email": "a@x.com"}}
        )
        with pytest.raises(DocumentConflict) as exc:
            mongo.create("accounts", {"email": "a@x.com"})
        assert exc.value.field == "email"

    def test_find_sorts_by_creation_descending(self, mongo, collection):
        oid = ObjectId()
        collection.find.return_value.sort.return_value = [{"_id": oid, "title": "t"}]
        docs = mongo.find("blogs", {"category": "deep"})
        collection.find.assert_called_once_with({"category": "deep"})
        collection.find.return_value.sort.assert_called_once_with([("created_at", -1), ("createdAt", -1)])
        assert docs == [{"id": str(oid), "title": "t"}]

    def test_previous_backend_rows_are_readable(self, mongo, collection):
        oid = ObjectId()
        written = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        collection.find.return_value.sort.return_value = [
            {
                "_id": oid,
                "title": "Old post",
                "description": "from before sections",
                "category": "deep",
                "fileUrl": "https://res.cloudinary.com/x/raw/upload/old.pdf",
                "publicId": "prefscale/blogs/old.pdf",
                "uploadedBy": "admin@prefscale.com",
                "createdAt": written,
                "updatedAt": written,
                "__v": 0,
            }
        ]
        service = BlogService(mongo, InMemoryBlobStore())
        blogs = service.list(section="allblogs")
        assert len(blogs) == 1
        blog = blogs[0]
        assert blog.id == str(oid)
        assert blog.section == BlogSection.RESOURCES
        assert blog.file_url.endswith("old.pdf")
        assert blog.public_id == "prefscale/blogs/old.pdf"
        assert blog.uploaded_by == "admin@prefscale.com"
        assert blog.created_at == written.isoformat()

    def test_previous_backend_password_field(self, mongo, collection):
        collection.find_one.return_value = {"_id": ObjectId(), "email": "a@x.com", "password": "$2b$10$hash"}
        doc = mongo.find_one("accounts", {"email": "a@x.com"})
        assert doc["password_hash"] == "$2b$10$hash"
        assert "password" not in doc

    def test_invalid_object_id(self, mongo, collection):
        assert mongo.find_by_id("blogs", "not-an-object-id") is None
        assert mongo.delete_by_id("blogs", "not-an-object-id") is False
        collection.find_one.assert_not_called()

    def test_delete_by_id(self, mongo, collection):
        oid = ObjectId()
        collection.delete_one.return_value.deleted_count = 1
        assert mongo.delete_by_id("blogs", str(oid)) is True
        collection.delete_one.assert_called_once_with({"_id": oid})

    def test_server_errors_become_storage_unavailable(self, mongo, collection):
        collection.find_one.side_effect = ServerSelectionTimeoutError("no servers")
        with pytest.raises(StorageUnavailable):
            mongo.find_one("accounts", {"email": "a@x.com"})
