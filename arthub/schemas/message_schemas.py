from pydantic import BaseModel, Field, field_validator
from typing import Optional


class MessageCreate(BaseModel):
    receiver_id: int
    content: str = Field(min_length=1, max_length=1000)
    artwork_id: Optional[int] = None

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("Message content is required")
        return v
