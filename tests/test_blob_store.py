"""Tests for blob storage"""

import io
from unittest.mock import patch

import pytest
from cloudinary.exceptions import Error as CloudinaryError

from prefscale.services.blob_store import CloudinaryBlobStore, InMemoryBlobStore, file_format
from prefscale.utils.config import CloudinarySettings
from prefscale.utils.exceptions import InvalidInput, StorageUnavailable

CONFIGURED = CloudinarySettings(cloud_name="demo", api_key="key", api_secret="secret")


@pytest.mark.parametrize("filename,expected", [("a.pdf", "pdf"), ("A.DOCX", "docx"), ("x.y.doc", "doc")])
def test_file_format_allowed(filename, expected):
    assert file_format(filename, ["pdf", "doc", "docx"]) == expected


@pytest.mark.parametrize("filename", ["a.exe", "noext", "", "pdf"])
def test_file_format_rejected(filename):
    with pytest.raises(InvalidInput):
        file_format(filename, ["pdf", "doc", "docx"])


def test_unconfigured_cloudinary_refused():
    with pytest.raises(StorageUnavailable):
        CloudinaryBlobStore(CloudinarySettings())


@patch("prefscale.services.blob_store.cloudinary.uploader.upload")
def test_cloudinary_upload(mock_upload):
    mock_upload.return_value = {
        "public_id": "prefscale/blogs/abc.pdf",
        "secure_url": "https://res.cloudinary.com/demo/raw/upload/prefscale/blogs/abc.pdf",
    }
    store = CloudinaryBlobStore(CONFIGURED)
    blob = store.upload(io.BytesIO(b"%PDF"), "guide.pdf", "prefscale/blogs")

    assert blob.id == "prefscale/blogs/abc.pdf"
    assert blob.url.startswith("https://")
    kwargs = mock_upload.call_args.kwargs
    assert kwargs["folder"] == "prefscale/blogs"
    assert kwargs["resource_type"] == "raw"
    assert kwargs["allowed_formats"] == ["pdf", "doc", "docx"]
    assert kwargs["public_id"].endswith(".pdf")


@patch("prefscale.services.blob_store.cloudinary.uploader.upload")
def test_cloudinary_rejects_format_before_upload(mock_upload):
    store = CloudinaryBlobStore(CONFIGURED)
    with pytest.raises(InvalidInput):
        store.upload(io.BytesIO(b"MZ"), "virus.exe", "prefscale/blogs")
    mock_upload.assert_not_called()


@patch("prefscale.services.blob_store.cloudinary.uploader.upload")
def test_cloudinary_upload_error(mock_upload):
    mock_upload.side_effect = CloudinaryError("quota exceeded")
    store = CloudinaryBlobStore(CONFIGURED)
    with pytest.raises(StorageUnavailable):
        store.upload(io.BytesIO(b"%PDF"), "guide.pdf", "prefscale/blogs")


@patch("prefscale.services.blob_store.cloudinary.uploader.destroy")
def test_cloudinary_delete(mock_destroy):
    mock_destroy.return_value = {"result": "ok"}
    CloudinaryBlobStore(CONFIGURED).delete("prefscale/blogs/abc.pdf")
    mock_destroy.assert_called_once_with("prefscale/blogs/abc.pdf", resource_type="raw")


def test_in_memory_store():
    store = InMemoryBlobStore()
    blob = store.upload(io.BytesIO(b"data"), "notes.docx", "folder")
    assert store.get(blob.id) == b"data"
    assert blob.url.endswith(blob.id)
    store.delete(blob.id)
    assert store.get(blob.id) is None
    assert store.deleted == [blob.id]
