from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field


class CartAddRequest(BaseModel):
    book_id: str
    quantity: int = Field(default=1, ge=1)


class CartUpdateRequest(BaseModel):
    quantity: int = Field(ge=1)


class CartLineOut(BaseModel):
    cart_item_id: str
    book_id: str
    seller_id: str
    title: str
    price: Decimal
    quantity: int
    stock: int
    line_total: Decimal


class CartOut(BaseModel):
    items: List[CartLineOut]
    total: Decimal
