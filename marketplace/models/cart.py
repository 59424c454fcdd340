from sqlalchemy import CheckConstraint, DateTime, UniqueConstraint
from sqlmodel import SQLModel, Field
from datetime import datetime
from uuid import uuid4
from marketplace.utils.clock import utc_now


class CartItem(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("buyer_id", "book_id"),
        CheckConstraint("quantity > 0", name="ck_cartitem_quantity_positive"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    buyer_id: str = Field(foreign_key="user.id", index=True)
    book_id: str = Field(foreign_key="book.id")
    quantity: int = Field(default=1, ge=1)
    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
