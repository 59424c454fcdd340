# marketplace/schemas/checkout_schemas.py
from decimal import Decimal
from typing import List

from pydantic import BaseModel


class CartSnapshotLine(BaseModel):
    """One cart line joined with the live book row, read inside the checkout transaction."""
    cart_line_id: str
    book_id: str
    seller_id: str
    title: str
    price: Decimal
    quantity: int
    stock: int
    is_active: bool = True


class SellerLine(BaseModel):
    book_id: str
    title: str
    price: Decimal        # unit price copied onto the order line
    quantity: int


class CheckoutResponse(BaseModel):
    message: str
    order_ids: List[str]
