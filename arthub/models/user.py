from sqlmodel import SQLModel, Field
from typing import List, Optional
from datetime import datetime


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    email: str = Field(index=True, unique=True)
    password: str
    role: str = Field(default="community", index=True)  # artist | community | admin
    avatar: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None

    # social links
    instagram: Optional[str] = None
    website: Optional[str] = None
    facebook: Optional[str] = None

    # artist profile
    verified: bool = Field(default=False, index=True)
    specializations: Optional[str] = None  # comma separated string
    total_sales: float = 0.0
    rating: float = 0.0
    total_ratings: int = 0

    is_active: bool = Field(default=True)
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def specialization_list(self) -> List[str]:
        if not self.specializations:
            return []
        return [s for s in self.specializations.split(",") if s]
