"""Contact form models"""

from typing import Optional

from pydantic import BaseModel


class ContactMessage(BaseModel):
    """Message left through the public contact form"""
    id: str
    name: str
    company: Optional[str] = None
    email: str
    message: str
    created_at: str
    updated_at: str
