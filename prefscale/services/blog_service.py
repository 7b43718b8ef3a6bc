"""
Blog / resource documents.

Files live in the blob store; the document store keeps the metadata.
Older documents were written before "section" existed. section_filter()
is the one place that keeps them visible: a document without "section"
matches any requested section.
"""

from typing import BinaryIO, Dict, List, Optional

from prefscale.models.blog import Blog, BlogCategory, BlogSection
from prefscale.services.blob_store import DEFAULT_ALLOWED_FORMATS, BlobStore
from prefscale.services.document_store import Document, DocumentStore
from prefscale.utils.exceptions import InvalidInput, NotFound, PrefscaleError, StorageUnavailable
from prefscale.utils.logger import get_logger

logger = get_logger(__name__)

BLOGS = "blogs"


def section_filter(section: BlogSection) -> Document:
    return {"$or": [{"section": section.value}, {"section": {"$exists": False}}]}


def _parse_enum(enum_cls, value: Optional[str], field: str):
    if value is None or not value.strip():
        return None
    try:
        return enum_cls(value.strip().lower())
    except ValueError:
        allowed = ", ".join(item.value for item in enum_cls)
        raise InvalidInput(f"Invalid {field}. Allowed: {allowed}")


class BlogService:
    """Upload, list and delete blogs"""

    def __init__(self, store: DocumentStore, blobs: Optional[BlobStore], folder: str = "prefscale/blogs"):
        self._store = store
        self._blobs = blobs
        self.folder = folder

    def upload(
        self,
        title: Optional[str],
        description: Optional[str],
        category: Optional[str] = None,
        section: Optional[str] = None,
        content: Optional[str] = None,
        file: Optional[BinaryIO] = None,
        filename: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> Blog:
        title = (title or "").strip()
        description = (description or "").strip()
        content = (content or "").strip() or None
        if not title or not description or (file is None and content is None):
            raise InvalidInput("Title, description and file are required")

        parsed_category = _parse_enum(BlogCategory, category, "category")
        parsed_section = _parse_enum(BlogSection, section, "section") or BlogSection.RESOURCES

        stored = None
        if file is not None:
            if self._blobs is None:
                raise StorageUnavailable("File storage is not configured")
            stored = self._blobs.upload(file, filename or "", self.folder, DEFAULT_ALLOWED_FORMATS)

        fields: Document = {
            "title": title,
            "description": description,
            "category": parsed_category.value if parsed_category else None,
            "section": parsed_section.value,
            "content": content,
            "file_url": stored.url if stored else None,
            "public_id": stored.id if stored else None,
            "uploaded_by": uploaded_by or "Admin",
        }
        try:
            document = self._store.create(BLOGS, fields)
        except Exception:
            if stored is not None:
                self._discard_blob(stored.id)
            raise

        logger.info("Blog uploaded", blog_id=document["id"], section=parsed_section.value)
        return Blog(**document)

    def list(self, section: Optional[str] = None, category: Optional[str] = None) -> List[Blog]:
        filter: Document = {}
        parsed_section = _parse_enum(BlogSection, section, "section")
        if parsed_section:
            filter.update(section_filter(parsed_section))
        parsed_category = _parse_enum(BlogCategory, category, "category")
        if parsed_category:
            filter["category"] = parsed_category.value
        return [Blog(**document) for document in self._store.find(BLOGS, filter)]

    def delete(self, blog_id: str) -> Dict[str, str]:
        document = self._store.find_by_id(BLOGS, blog_id)
        if document is None:
            raise NotFound("Blog not found")

        public_id = document.get("public_id")
        if public_id:
            if self._blobs is None:
                raise StorageUnavailable("File storage is not configured")
            self._blobs.delete(public_id)

        self._store.delete_by_id(BLOGS, blog_id)
        logger.info("Blog deleted", blog_id=blog_id)
        return {"message": "Blog deleted successfully"}

    def _discard_blob(self, blob_id: str) -> None:
        try:
            self._blobs.delete(blob_id)
        except PrefscaleError as e:
            logger.error("Failed to remove orphaned blob", public_id=blob_id, error=str(e))
