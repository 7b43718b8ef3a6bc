"""Service container wiring settings, stores and services together"""

from datetime import timedelta
from typing import Optional

from .auth.credentials import CredentialService
from .auth.guard import AccessGuard
from .auth.tokens import TokenCodec
from .services.account_store import AccountStore
from .services.blob_store import BlobStore, CloudinaryBlobStore
from .services.blog_service import BlogService
from .services.contact_service import ContactService
from .services.document_store import DocumentStore, JsonDocumentStore, MongoDocumentStore
from .utils.config import Settings
from .utils.logger import get_logger

logger = get_logger(__name__)


class PrefscaleApp:
    """Everything a request handler needs, built once at startup"""

    def __init__(
        self,
        settings: Settings,
        document_store: Optional[DocumentStore] = None,
        blob_store: Optional[BlobStore] = None,
    ):
        self.settings = settings
        self.document_store = document_store or self._build_document_store(settings)
        self.blob_store = blob_store if blob_store is not None else self._build_blob_store(settings)

        self.tokens = TokenCodec(settings.jwt_secret, ttl=timedelta(hours=settings.token_ttl_hours))
        self.guard = AccessGuard(self.tokens)
        self.accounts = AccountStore(self.document_store)
        self.credentials = CredentialService(settings, self.accounts, self.tokens)
        self.blogs = BlogService(self.document_store, self.blob_store, folder=settings.blog_folder)
        self.contacts = ContactService(self.document_store)

        logger.info(
            "Application initialized",
            environment=settings.environment,
            document_store=type(self.document_store).__name__,
            blob_store=type(self.blob_store).__name__ if self.blob_store else None,
            admin_configured=settings.admin_configured,
        )

    @staticmethod
    def _build_document_store(settings: Settings) -> DocumentStore:
        if settings.mongo_uri:
            return MongoDocumentStore(settings.mongo_uri, database=settings.mongo_db)
        return JsonDocumentStore(settings.data_dir)

    @staticmethod
    def _build_blob_store(settings: Settings) -> Optional[BlobStore]:
        if not settings.cloudinary.is_configured:
            logger.warning("Cloudinary is not configured; file uploads are disabled")
            return None
        return CloudinaryBlobStore(settings.cloudinary)

    def shutdown(self) -> None:
        close = getattr(self.document_store, "close", None)
        if close is not None:
            close()
