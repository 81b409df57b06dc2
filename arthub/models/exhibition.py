from sqlmodel import SQLModel, Field
from typing import List, Optional
from datetime import datetime
from sqlalchemy import Column, JSON, UniqueConstraint


class Exhibition(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    description: str
    start_date: datetime = Field(index=True)
    end_date: datetime = Field(index=True)
    location: str
    image: str
    featured_artwork_ids: List[int] = Field(default_factory=list, sa_column=Column(JSON))
    organizer_id: int = Field(foreign_key="user.id", index=True)

    status: str = Field(default="upcoming", index=True)  # upcoming | ongoing | completed
    max_capacity: Optional[int] = None

    access_type: str = Field(default="free")  # free | paid
    price: float = 0.0
    tags: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_free(self) -> bool:
        return self.access_type == "free" or not self.price

    def refresh_status(self, now: Optional[datetime] = None) -> str:
        now = now or datetime.utcnow()
        if now < self.start_date:
            self.status = "upcoming"
        elif now <= self.end_date:
            self.status = "ongoing"
        else:
            self.status = "completed"
        return self.status


class ExhibitionRegistration(SQLModel, table=True):
    __tablename__ = "exhibition_registration"
    __table_args__ = (UniqueConstraint("exhibition_id", "user_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    exhibition_id: int = Field(foreign_key="exhibition.id", index=True)
    user_id: int = Field(foreign_key="user.id")
    created_at: datetime = Field(default_factory=datetime.utcnow)
