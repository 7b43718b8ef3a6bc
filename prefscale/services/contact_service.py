"""Contact form persistence"""

from typing import Dict, Optional

from prefscale.models.contact import ContactMessage
from prefscale.services.document_store import DocumentStore
from prefscale.utils.exceptions import InvalidInput
from prefscale.utils.logger import get_logger

logger = get_logger(__name__)

CONTACTS = "contacts"


class ContactService:
    def __init__(self, store: DocumentStore):
        self._store = store

    def submit(
        self,
        name: Optional[str],
        email: Optional[str],
        message: Optional[str],
        company: Optional[str] = None,
    ) -> Dict[str, str]:
        """Store a contact message. name, email and message are required."""
        name, email, message = ((v or "").strip() for v in (name, email, message))
        if not name or not email or not message:
            raise InvalidInput("Required fields missing")

        document = self._store.create(
            CONTACTS,
            {"name": name, "company": (company or "").strip() or None, "email": email, "message": message},
        )
        contact = ContactMessage(**document)
        logger.info("Contact message stored", contact_id=contact.id)
        return {"message": "Message sent successfully"}
