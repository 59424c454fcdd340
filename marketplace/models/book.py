from sqlalchemy import CheckConstraint, DateTime
from sqlmodel import SQLModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime
from uuid import uuid4
from marketplace.utils.clock import utc_now


class Book(SQLModel, table=True):
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_book_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_book_price_non_negative"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    seller_id: str = Field(foreign_key="user.id", index=True)

    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None

    #Shop Details
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    is_active: bool = True

    #timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))

    @property
    def in_stock(self) -> bool:
        return self.stock > 0
