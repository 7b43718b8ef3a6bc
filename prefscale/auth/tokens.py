"""
Signed session tokens (HS256 JWT).

Tokens are stateless: nothing is stored server-side and the only way a
token stops working is its "exp" claim passing.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from prefscale.models.account import Role
from prefscale.models.token import SessionToken
from prefscale.utils.exceptions import Unauthenticated

ALGORITHM = "HS256"


class TokenCodec:
    """Mint and verify session tokens with one server-held secret"""

    def __init__(self, secret: str, ttl: timedelta = timedelta(hours=24)):
        self._secret = secret
        self.ttl = ttl

    def issue(
        self,
        role: Role,
        subject: Optional[str] = None,
        email: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> str:
        issued_at = now or datetime.now(timezone.utc)
        token = SessionToken(
            role=role,
            subject=subject,
            email=email,
            issued_at=issued_at,
            expires_at=issued_at + self.ttl,
        )
        return jwt.encode(token.to_claims(), self._secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> SessionToken:
        """Decode a token. Every failure surfaces as Unauthenticated("Invalid token")."""
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "role"]},
            )
            return SessionToken.from_claims(claims)
        except (jwt.PyJWTError, ValueError, KeyError, TypeError):
            raise Unauthenticated("Invalid token")
