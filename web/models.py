"""API request/response models"""

from typing import Optional

from pydantic import BaseModel, Field


class SignupRequest(BaseModel):
    """Fields are optional here so missing ones get the service's 400 message"""
    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    token: str
    role: str
    name: Optional[str] = None


class ContactRequest(BaseModel):
    name: Optional[str] = None
    company: Optional[str] = None
    email: Optional[str] = None
    message: Optional[str] = Field(default=None, max_length=5000)


class MessageResponse(BaseModel):
    message: str
