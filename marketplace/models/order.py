from sqlalchemy import DateTime
from sqlmodel import SQLModel, Field, Relationship
from typing import List
from decimal import Decimal
from datetime import datetime
from uuid import uuid4
from marketplace.utils.clock import utc_now

from marketplace.constants.order_status import PENDING
from marketplace.models.order_item import OrderItem


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    buyer_id: str = Field(foreign_key="user.id", index=True)
    seller_id: str = Field(foreign_key="user.id", index=True)

    status: str = Field(default=PENDING)
    # sum of its own lines' price * quantity, fixed at creation
    total_price: Decimal = Field(max_digits=12, decimal_places=2)

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    items: List["OrderItem"] = Relationship(back_populates="order")
