from sqlmodel import SQLModel, Field
from typing import List, Optional
from datetime import datetime
from sqlalchemy import Column, JSON, UniqueConstraint


CATEGORIES = [
    "Painting",
    "Photography",
    "Sculpture",
    "Digital Art",
    "Mixed Media",
    "Abstract",
    "Portrait",
    "Landscape",
    "Still Life",
    "Street Art",
    "Other",
]

PLACEHOLDER_IMAGE = "https://images.pexels.com/photos/1545743/pexels-photo-1545743.jpeg"


class Artwork(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str
    price: float = Field(index=True)
    category: str = Field(index=True)
    medium: str
    dimensions: str
    images: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    artist_id: int = Field(foreign_key="user.id", index=True)
    status: str = Field(default="available", index=True)  # available | sold | reserved

    tags: Optional[str] = None  # comma separated string
    views: int = 0
    featured: bool = False

    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def tag_list(self) -> List[str]:
        if not self.tags:
            return []
        return [t for t in self.tags.split(",") if t]


class ArtworkLike(SQLModel, table=True):
    __tablename__ = "artwork_like"
    __table_args__ = (UniqueConstraint("artwork_id", "user_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    artwork_id: int = Field(foreign_key="artwork.id", index=True)
    user_id: int = Field(foreign_key="user.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
