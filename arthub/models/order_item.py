from sqlmodel import SQLModel, Field , Relationship
from typing import Optional , TYPE_CHECKING

if TYPE_CHECKING:
    from arthub.models.order import Order

class OrderItem(SQLModel, table=True):
    __tablename__ = "order_item"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(foreign_key="order.id", index=True)
    artwork_id: int = Field(foreign_key="artwork.id")

    title: str
    price: float
    quantity: int

    order: Optional["Order"] = Relationship(back_populates="items")
