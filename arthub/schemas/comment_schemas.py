from pydantic import BaseModel, Field, field_validator
from typing import Optional


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=500)
    parent_comment_id: Optional[int] = None

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("Comment content is required")
        return v


class CommentUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=500)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("Comment content is required")
        return v
