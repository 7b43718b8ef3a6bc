"""
Access guard for protected operations.

Per request:

    no token            -> Unauthenticated("No token provided")
    bad/expired token   -> Unauthenticated("Invalid token")
    valid, wrong role   -> Forbidden("Admin only")
    valid, role ok      -> Identity

The guard is a pure function of the Authorization header, the secret and
the required role. It never touches a store.
"""

from typing import Mapping, Optional

from prefscale.auth.tokens import TokenCodec
from prefscale.models.account import Role
from prefscale.models.token import Identity
from prefscale.utils.exceptions import Forbidden, Unauthenticated


def extract_bearer_token(headers: Mapping[str, str]) -> Optional[str]:
    """Return the token from "Authorization: Bearer <token>", or None"""
    auth_header = headers.get("authorization") or headers.get("Authorization")
    if not auth_header:
        return None
    scheme, _, token = auth_header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


class AccessGuard:
    def __init__(self, tokens: TokenCodec):
        self._tokens = tokens

    def authorize(self, headers: Mapping[str, str], required_role: Optional[Role] = None) -> Identity:
        token = extract_bearer_token(headers)
        if token is None:
            raise Unauthenticated("No token provided")

        session = self._tokens.verify(token)

        if required_role == Role.ADMIN and session.role != Role.ADMIN:
            raise Forbidden("Admin only")

        return Identity(role=session.role, subject=session.subject, email=session.email)
