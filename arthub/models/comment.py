from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from sqlalchemy import UniqueConstraint


class Comment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    artwork_id: int = Field(foreign_key="artwork.id", index=True)
    author_id: int = Field(foreign_key="user.id", index=True)
    content: str = Field(max_length=500)

    # replies point at their top-level comment
    parent_comment_id: Optional[int] = Field(default=None, foreign_key="comment.id", index=True)

    is_edited: bool = False
    edited_at: Optional[datetime] = None

    is_deleted: bool = Field(default=False, index=True)
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[int] = Field(default=None, foreign_key="user.id")

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class CommentLike(SQLModel, table=True):
    __tablename__ = "comment_like"
    __table_args__ = (UniqueConstraint("comment_id", "user_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    comment_id: int = Field(foreign_key="comment.id", index=True)
    user_id: int = Field(foreign_key="user.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
