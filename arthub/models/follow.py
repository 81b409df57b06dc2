from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from sqlalchemy import CheckConstraint, UniqueConstraint


class Follow(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("follower_id", "following_id"),
        CheckConstraint("follower_id <> following_id", name="ck_follow_not_self"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    follower_id: int = Field(foreign_key="user.id", index=True)
    following_id: int = Field(foreign_key="user.id", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
