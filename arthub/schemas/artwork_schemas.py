from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional

from arthub.models.artwork import CATEGORIES

ArtworkStatus = Literal["available", "sold", "reserved"]


def normalize_tags(tags: Optional[List[str]]) -> Optional[str]:
    if tags is None:
        return None
    cleaned = [t.strip().lower() for t in tags if t and t.strip()]
    return ",".join(cleaned)


class ArtworkCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=10, max_length=2000)
    price: float = Field(ge=0)
    category: str
    medium: str = Field(min_length=1, max_length=100)
    dimensions: str = Field(min_length=1, max_length=100)
    images: List[str] = []
    tags: List[str] = []

    @field_validator("category")
    @classmethod
    def check_category(cls, v: str):
        if v not in CATEGORIES:
            raise ValueError("Invalid category")
        return v


class ArtworkUpdate(BaseModel):
    model_config = {"extra": "forbid"}

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=10, max_length=2000)
    price: Optional[float] = Field(default=None, ge=0)
    category: Optional[str] = None
    medium: Optional[str] = Field(default=None, max_length=100)
    dimensions: Optional[str] = Field(default=None, max_length=100)
    tags: Optional[List[str]] = None
    status: Optional[ArtworkStatus] = None

    @field_validator("category")
    @classmethod
    def check_category(cls, v: Optional[str]):
        if v is not None and v not in CATEGORIES:
            raise ValueError("Invalid category")
        return v
