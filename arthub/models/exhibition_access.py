from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from sqlalchemy import UniqueConstraint


class ExhibitionAccess(SQLModel, table=True):
    __tablename__ = "exhibition_access"
    __table_args__ = (
        UniqueConstraint("user_id", "exhibition_id", name="uq_exhibition_access_user_exhibition"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id")
    exhibition_id: int = Field(foreign_key="exhibition.id", index=True)

    access_type: str = Field(index=True)  # free | paid
    payment_method: Optional[str] = None  # razorpay | other
    payment_session_id: Optional[str] = None
    order_id: Optional[int] = Field(default=None, foreign_key="order.id")

    accessed_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
