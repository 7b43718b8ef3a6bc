"""Account data models"""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Role(str, Enum):
    """Identity class carried in a session token"""
    USER = "user"
    ADMIN = "admin"


class Account(BaseModel):
    """Stored account. Only the bcrypt hash of the password is kept."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    company: str
    email: str
    password_hash: str
    role: Role = Role.USER
    created_at: str  # ISO format timestamp
    updated_at: str
