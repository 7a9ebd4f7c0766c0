"""Blog schemas"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from urbansprout.models.blog import (
    BlogCategory,
    TITLE_MAX_LENGTH,
    CONTENT_MAX_LENGTH,
    COMMENT_MAX_LENGTH,
)


class BlogCreate(BaseModel):
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    content: str = Field(min_length=1, max_length=CONTENT_MAX_LENGTH)
    image: Optional[str] = None
    category: Optional[BlogCategory] = None
    tags: List[str] = []


class BlogUpdate(BlogCreate):
    pass


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=COMMENT_MAX_LENGTH)


class ModerationRequest(BaseModel):
    approve: bool
    reason: Optional[str] = Field(None, max_length=500)


class CommentResponse(BaseModel):
    id: str
    author: str
    author_email: str
    content: str
    created_at: datetime


class BlogPostResponse(BaseModel):
    """Blog post as shown in the feed"""
    id: str
    title: str
    content: str
    excerpt: Optional[str] = None
    image: Optional[str] = None
    author: str
    author_email: str
    category: Optional[str] = None
    tags: List[str] = []
    like_count: int = 0
    bookmark_count: int = 0
    share_count: int = 0
    comment_count: int = 0
    comments: List[CommentResponse] = []
    liked: bool = False
    bookmarked: bool = False
    status: str
    approval_status: str
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
