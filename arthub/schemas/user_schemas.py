from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime


class UserRegister(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    role: Literal["artist", "community"] = "community"
    bio: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=100)
    specializations: Optional[List[str]] = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    bio: Optional[str] = Field(default=None, max_length=500)
    location: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    avatar: Optional[str] = None
    instagram: Optional[str] = None
    website: Optional[str] = None
    facebook: Optional[str] = None
    specializations: Optional[List[str]] = None


class AdminUserUpdate(ProfileUpdate):
    model_config = ConfigDict(extra="forbid")

    email: Optional[EmailStr] = None
    role: Optional[Literal["artist", "community", "admin"]] = None
    verified: Optional[bool] = None
    is_active: Optional[bool] = None
    total_sales: Optional[float] = Field(default=None, ge=0)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    total_ratings: Optional[int] = Field(default=None, ge=0)


class UserPublic(BaseModel):
    id: int
    name: str
    role: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    verified: bool
    specializations: List[str] = []
    rating: float
    total_sales: float
    total_ratings: int
    created_at: datetime


class UserPrivate(UserPublic):
    email: EmailStr
    phone: Optional[str] = None
    is_active: bool
    last_login: Optional[datetime] = None
    instagram: Optional[str] = None
    website: Optional[str] = None
    facebook: Optional[str] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class AuthResponse(BaseModel):
    message: str
    user: UserPrivate
    token: str
