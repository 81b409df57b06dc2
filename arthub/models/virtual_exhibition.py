from sqlmodel import SQLModel, Field
from typing import List, Optional
from datetime import datetime
from sqlalchemy import Column, JSON, UniqueConstraint


class VirtualExhibition(SQLModel, table=True):
    __tablename__ = "virtual_exhibition"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str
    theme: str = Field(index=True)
    artist_notes: Optional[str] = None
    start_date: datetime
    end_date: datetime
    organizer_id: int = Field(foreign_key="user.id", index=True)
    status: str = Field(default="draft", index=True)  # draft | published | archived

    featured_artwork_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    views: int = 0
    visits: int = 0

    is_free: bool = Field(default=True, index=True)
    price: float = 0.0
    tags: Optional[str] = None
    cover_image: str
    additional_images: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # settings
    allow_comments: bool = True
    allow_sharing: bool = True
    require_registration: bool = False
    max_attendees: Optional[int] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class VirtualExhibitionAttendee(SQLModel, table=True):
    __tablename__ = "virtual_exhibition_attendee"
    __table_args__ = (UniqueConstraint("virtual_exhibition_id", "user_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    virtual_exhibition_id: int = Field(foreign_key="virtual_exhibition.id", index=True)
    user_id: int = Field(foreign_key="user.id")
    joined_at: datetime = Field(default_factory=datetime.utcnow)
