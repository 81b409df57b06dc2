from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class CartAddRequest(BaseModel):
    artwork_id: int
    quantity: int = 1


class CartUpdateRequest(BaseModel):
    quantity: int


class CartArtworkDetails(BaseModel):
    title: str
    price: float
    images: List[str]
    status: str
    artist_id: int
    artist_name: Optional[str] = None


class CartLine(BaseModel):
    artwork_id: int
    quantity: int
    added_at: datetime
    line_total: float
    artwork: CartArtworkDetails


class CartResponse(BaseModel):
    items: List[CartLine]
    item_count: int
    total_amount: float
