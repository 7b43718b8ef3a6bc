"""Blog / resource document models"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class BlogCategory(str, Enum):
    FOUNDATIONS = "foundations"
    DEEP = "deep"


class BlogSection(str, Enum):
    """Resources page or the all-blogs page"""
    RESOURCES = "resources"
    ALLBLOGS = "allblogs"


class Blog(BaseModel):
    """Uploaded blog: a file in the blob store, a rich-text body, or both"""
    id: str
    title: str
    description: str
    category: Optional[BlogCategory] = None
    section: BlogSection = BlogSection.RESOURCES
    content: Optional[str] = None
    file_url: Optional[str] = None
    public_id: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: str
    updated_at: str
