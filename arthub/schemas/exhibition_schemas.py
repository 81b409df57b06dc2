from pydantic import BaseModel, Field, model_validator
from typing import List, Literal, Optional
from datetime import datetime


class ExhibitionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=10, max_length=2000)
    start_date: datetime
    end_date: datetime
    location: str = Field(min_length=1, max_length=200)
    image: str
    featured_artworks: List[int] = []
    max_capacity: Optional[int] = Field(default=None, ge=1)
    access_type: Literal["free", "paid"] = "free"
    price: float = Field(default=0, ge=0)
    tags: List[str] = []

    @model_validator(mode="after")
    def validate_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        if self.access_type == "paid" and self.price <= 0:
            raise ValueError("Paid exhibitions need a price")
        return self


class VirtualExhibitionSettings(BaseModel):
    allow_comments: bool = True
    allow_sharing: bool = True
    require_registration: bool = False
    max_attendees: Optional[int] = Field(default=None, ge=1)


class VirtualExhibitionCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    theme: str = Field(min_length=1, max_length=100)
    artist_notes: Optional[str] = Field(default=None, max_length=1000)
    start_date: datetime
    end_date: datetime
    is_free: bool = True
    price: float = Field(default=0, ge=0)
    tags: List[str] = []
    cover_image: str
    additional_images: List[str] = []
    featured_artworks: List[int] = []
    settings: VirtualExhibitionSettings = VirtualExhibitionSettings()

    @model_validator(mode="after")
    def validate_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class VirtualExhibitionUpdate(BaseModel):
    model_config = {"extra": "forbid"}

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    theme: Optional[str] = Field(default=None, max_length=100)
    artist_notes: Optional[str] = Field(default=None, max_length=1000)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[Literal["draft", "published", "archived"]] = None
    is_free: Optional[bool] = None
    price: Optional[float] = Field(default=None, ge=0)
    tags: Optional[List[str]] = None
    cover_image: Optional[str] = None
    additional_images: Optional[List[str]] = None
    featured_artworks: Optional[List[int]] = None
    settings: Optional[VirtualExhibitionSettings] = None
