"""
Blob storage for uploaded blog files.

CloudinaryBlobStore uploads raw files (pdf/doc/docx) into a folder and
deletes them by public id. InMemoryBlobStore is the test double.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import BinaryIO, Dict, Iterable, Optional, Protocol

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from prefscale.utils.config import CloudinarySettings
from prefscale.utils.exceptions import InvalidInput, StorageUnavailable
from prefscale.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ALLOWED_FORMATS = ("pdf", "doc", "docx")


@dataclass(frozen=True)
class StoredBlob:
    url: str
    id: str


class BlobStore(Protocol):
    """Operations the services need from object storage."""

    def upload(
        self,
        file: BinaryIO,
        filename: str,
        folder: str,
        allowed_formats: Iterable[str] = DEFAULT_ALLOWED_FORMATS,
    ) -> StoredBlob:
        ...

    def delete(self, blob_id: str) -> None:
        ...


def file_format(filename: str, allowed_formats: Iterable[str]) -> str:
    """Return the lower-case extension of filename, or raise InvalidInput if not allowed"""
    extension = PurePath(filename or "").suffix.lower().lstrip(".")
    allowed = [f.lower() for f in allowed_formats]
    if extension not in allowed:
        raise InvalidInput(f"Unsupported file format. Allowed: {', '.join(allowed)}")
    return extension


class CloudinaryBlobStore:
    """Cloudinary storage; files go up as resource_type=raw"""

    resource_type = "raw"

    def __init__(self, settings: CloudinarySettings):
        if not settings.is_configured:
            raise StorageUnavailable("Cloudinary is not configured")
        cloudinary.config(
            cloud_name=settings.cloud_name,
            api_key=settings.api_key,
            api_secret=settings.api_secret,
            secure=True,
        )

    def upload(
        self,
        file: BinaryIO,
        filename: str,
        folder: str,
        allowed_formats: Iterable[str] = DEFAULT_ALLOWED_FORMATS,
    ) -> StoredBlob:
        allowed = list(allowed_formats)
        extension = file_format(filename, allowed)
        # Raw uploads keep the extension in the public id so the URL serves the right type.
        public_id = f"{uuid.uuid4().hex}.{extension}"
        try:
            result = cloudinary.uploader.upload(
                file,
                folder=folder,
                public_id=public_id,
                resource_type=self.resource_type,
                allowed_formats=allowed,
                overwrite=False,
            )
        except CloudinaryError as e:
            logger.error("Cloudinary upload failed", folder=folder, filename=filename, error=str(e))
            raise StorageUnavailable("Upload failed")

        url = result.get("secure_url") or result.get("url")
        logger.info("Blob uploaded", public_id=result.get("public_id"), folder=folder)
        return StoredBlob(url=url, id=result["public_id"])

    def delete(self, blob_id: str) -> None:
        try:
            result = cloudinary.uploader.destroy(blob_id, resource_type=self.resource_type)
        except CloudinaryError as e:
            logger.error("Cloudinary delete failed", public_id=blob_id, error=str(e))
            raise StorageUnavailable("Delete failed")
        if result.get("result") not in ("ok", "not found"):
            logger.warning("Unexpected Cloudinary delete result", public_id=blob_id, result=result)


@dataclass
class InMemoryBlobStore:
    """Test double for blob storage"""

    base_url: str = "https://blobs.example.com"
    blobs: Dict[str, bytes] = field(default_factory=dict)
    deleted: list = field(default_factory=list)
    fail_uploads: bool = False

    def upload(
        self,
        file: BinaryIO,
        filename: str,
        folder: str,
        allowed_formats: Iterable[str] = DEFAULT_ALLOWED_FORMATS,
    ) -> StoredBlob:
        extension = file_format(filename, allowed_formats)
        if self.fail_uploads:
            raise StorageUnavailable("Upload failed")
        blob_id = f"{folder}/{uuid.uuid4().hex}.{extension}"
        self.blobs[blob_id] = file.read()
        return StoredBlob(url=f"{self.base_url}/{blob_id}", id=blob_id)

    def delete(self, blob_id: str) -> None:
        self.blobs.pop(blob_id, None)
        self.deleted.append(blob_id)

    def get(self, blob_id: str) -> Optional[bytes]:
        return self.blobs.get(blob_id)
