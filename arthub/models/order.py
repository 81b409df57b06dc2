from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from datetime import datetime

from arthub.models.order_item import OrderItem


class Order(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)

    total_amount: float
    status: str = Field(default="pending", index=True)  # pending | paid | cancelled | refunded

    payment_method: str = Field(default="razorpay")
    payment_session_id: Optional[str] = Field(default=None, index=True)
    payment_intent_id: Optional[str] = Field(default=None, index=True)

    # shipping address snapshot
    shipping_street: Optional[str] = None
    shipping_city: Optional[str] = None
    shipping_state: Optional[str] = None
    shipping_zip_code: Optional[str] = None
    shipping_country: Optional[str] = None

    # set for exhibition ticket orders (no artwork lines)
    exhibition_id: Optional[int] = Field(default=None, foreign_key="exhibition.id")

    paid_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    items: List["OrderItem"] = Relationship(back_populates="order")

    @property
    def shipping_address(self) -> Optional[dict]:
        if not self.shipping_street:
            return None
        return {
            "street": self.shipping_street,
            "city": self.shipping_city,
            "state": self.shipping_state,
            "zip_code": self.shipping_zip_code,
            "country": self.shipping_country,
        }
