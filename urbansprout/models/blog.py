"""Blog post models"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from enum import Enum
import uuid

TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 5000
COMMENT_MAX_LENGTH = 500
EXCERPT_LENGTH = 200


class BlogStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    PENDING_APPROVAL = "pending_approval"
    REJECTED = "rejected"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class BlogCategory(str, Enum):
    QUESTION = "question"
    SUCCESS_STORY = "success_story"


class Reaction(BaseModel):
    """A like, bookmark or share by one user"""
    user_email: str
    user_id: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Comment(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    author: str
    author_email: str
    user_id: str
    content: str = Field(max_length=COMMENT_MAX_LENGTH)
    created_at: datetime = Field(default_factory=datetime.utcnow)


def make_excerpt(content: str) -> str:
    return content[:EXCERPT_LENGTH] + "..."


class BlogPost(BaseModel):
    """Community blog post"""
    id: Optional[str] = Field(None, alias="_id")
    title: str = Field(max_length=TITLE_MAX_LENGTH)
    content: str = Field(max_length=CONTENT_MAX_LENGTH)
    excerpt: Optional[str] = None
    image: Optional[str] = None
    author: str
    author_email: str
    author_id: Optional[str] = None
    category: Optional[BlogCategory] = None
    tags: List[str] = []
    likes: List[Reaction] = []
    bookmarks: List[Reaction] = []
    shares: List[Reaction] = []
    comments: List[Comment] = []
    views: int = 0
    status: BlogStatus = BlogStatus.PENDING_APPROVAL
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    rejection_reason: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        populate_by_name = True
        use_enum_values = True
