"""
Account registration and login.

Two authentication paths coexist:

1. The administrator, defined only by ADMIN_EMAIL / ADMIN_PASSWORD in
   configuration. Checked first, by constant-time equality, without touching
   the store. Never a stored account.
2. Stored accounts, checked against their bcrypt hash.

Both "no such account" and "wrong password" fail with the same message so
callers cannot probe which emails are registered.
"""

import hmac
from dataclasses import dataclass
from typing import Dict, Optional

from email_validator import EmailNotValidError, validate_email
from fastapi.concurrency import run_in_threadpool

from prefscale.auth.passwords import hash_password_async, verify_password_async
from prefscale.auth.tokens import TokenCodec
from prefscale.models.account import Role
from prefscale.services.account_store import AccountStore
from prefscale.utils.config import Settings
from prefscale.utils.exceptions import (
    DuplicateEmail,
    InvalidCredentials,
    InvalidInput,
    MissingCredentials,
    PrefscaleError,
    ServiceUnavailable,
    StorageUnavailable,
)
from prefscale.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    role: Role
    name: Optional[str] = None

    def as_dict(self) -> Dict[str, str]:
        payload = {"token": self.token, "role": self.role.value}
        if self.name is not None:
            payload["name"] = self.name
        return payload


def _equals(supplied: str, expected: Optional[str]) -> bool:
    if expected is None:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


class CredentialService:
    """Signup and login; issues session tokens"""

    def __init__(self, settings: Settings, accounts: AccountStore, tokens: TokenCodec):
        self._settings = settings
        self._accounts = accounts
        self._tokens = tokens

    async def register(
        self,
        name: Optional[str],
        company: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> Dict[str, str]:
        """Create a user account. Does not log the caller in."""
        name, company, email = (v.strip() if v else "" for v in (name, company, email))
        if not (name and company and email and password):
            raise InvalidInput("Required fields missing")
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            raise InvalidInput("Invalid email address")

        try:
            if await run_in_threadpool(self._accounts.find_by_email, email):
                raise DuplicateEmail()
            password_hash = await hash_password_async(password, self._settings.bcrypt_rounds)
            await run_in_threadpool(
                self._accounts.create,
                name=name,
                company=company,
                email=email,
                password_hash=password_hash,
            )
        except StorageUnavailable as e:
            logger.error("Signup failed", error=str(e))
            raise StorageUnavailable("Signup failed")

        return {"message": "Signup successful"}

    async def authenticate(self, email: Optional[str], password: Optional[str]) -> LoginResult:
        """Log in as the configured administrator or a stored account"""
        if not email or not password:
            raise MissingCredentials()

        if self._is_admin(email, password):
            logger.info("Admin login")
            return LoginResult(token=self._tokens.issue(Role.ADMIN), role=Role.ADMIN)

        try:
            account = await run_in_threadpool(self._accounts.find_by_email, email)
            if account is None:
                raise InvalidCredentials()
            if not await verify_password_async(password, account.password_hash):
                raise InvalidCredentials()
            token = self._tokens.issue(Role.USER, subject=account.id, email=account.email)
        except ServiceUnavailable as e:
            logger.error("Login error", error=str(e))
            raise ServiceUnavailable()
        except PrefscaleError:
            raise
        except Exception as e:
            logger.exception("Login error", error=str(e))
            raise ServiceUnavailable()

        logger.info("User login", account_id=account.id)
        return LoginResult(token=token, role=Role.USER, name=account.name)

    def _is_admin(self, email: str, password: str) -> bool:
        if not self._settings.admin_configured:
            return False
        # Evaluate both comparisons so timing does not reveal which one failed.
        email_ok = _equals(email, self._settings.admin_email)
        password_ok = _equals(password, self._settings.admin_password)
        return email_ok and password_ok
