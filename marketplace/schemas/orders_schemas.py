from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import BaseModel

from marketplace.constants.order_status import ORDER_STATUSES


class OrderLineOut(BaseModel):
    id: str
    book_id: str
    book_title: str
    price: Decimal
    quantity: int
    line_total: Decimal


class OrderOut(BaseModel):
    id: str
    buyer_id: str
    seller_id: str
    status: str
    total_price: Decimal
    created_at: datetime
    items: List[OrderLineOut]


class OrderStatusUpdate(BaseModel):
    status: str

    def is_known(self) -> bool:
        return self.status in ORDER_STATUSES
