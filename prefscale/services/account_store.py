"""
Account persistence on top of a document store.
Emails are unique; the store enforces it with a unique key on "email".
"""

from typing import Optional

from prefscale.models.account import Account, Role
from prefscale.services.document_store import DocumentStore
from prefscale.utils.exceptions import DocumentConflict, DuplicateEmail
from prefscale.utils.logger import get_logger

logger = get_logger(__name__)

ACCOUNTS = "accounts"


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AccountStore:
    """Create and look up accounts by email"""

    def __init__(self, store: DocumentStore):
        self._store = store
        self._store.ensure_unique(ACCOUNTS, "email")

    def find_by_email(self, email: str) -> Optional[Account]:
        document = self._store.find_one(ACCOUNTS, {"email": normalize_email(email)})
        return Account(**document) if document else None

    def create(self, name: str, company: str, email: str, password_hash: str) -> Account:
        """Persist a new account with role "user". Raises DuplicateEmail."""
        email = normalize_email(email)
        if self._store.find_one(ACCOUNTS, {"email": email}):
            raise DuplicateEmail()
        try:
            document = self._store.create(
                ACCOUNTS,
                {
                    "name": name,
                    "company": company,
                    "email": email,
                    "password_hash": password_hash,
                    "role": Role.USER.value,
                },
            )
        except DocumentConflict:
            # Lost a race with a concurrent signup for the same email.
            raise DuplicateEmail()
        account = Account(**document)
        logger.info("Account created", account_id=account.id)
        return account
