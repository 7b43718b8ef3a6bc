"""Session token models"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from .account import Role


class SessionToken(BaseModel):
    """
    Decoded session token.

    Claims mapping:
        role  -> role
        sub   -> subject (account id, user tokens only)
        email -> email (user tokens only)
        iat   -> issued_at
        exp   -> expires_at
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    subject: Optional[str] = None
    email: Optional[str] = None
    issued_at: datetime
    expires_at: datetime

    def to_claims(self) -> Dict[str, Any]:
        claims: Dict[str, Any] = {
            "role": self.role.value,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }
        if self.subject is not None:
            claims["sub"] = self.subject
        if self.email is not None:
            claims["email"] = self.email
        return claims

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "SessionToken":
        return cls(
            role=Role(claims["role"]),
            subject=claims.get("sub"),
            email=claims.get("email"),
            issued_at=datetime.fromtimestamp(claims.get("iat", claims["exp"]), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(claims["exp"], tz=timezone.utc),
        )


class Identity(BaseModel):
    """Authenticated caller attached to a request by the access guard"""

    model_config = ConfigDict(frozen=True)

    role: Role
    subject: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
