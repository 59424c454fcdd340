from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, TYPE_CHECKING
from decimal import Decimal
from uuid import uuid4

if TYPE_CHECKING:
    from marketplace.models.order import Order


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True)
    book_id: str = Field(foreign_key="book.id")

    book_title: str
    # price at the time of purchase, never follows later Book.price edits
    price: Decimal = Field(max_digits=10, decimal_places=2)
    quantity: int

    order: Optional["Order"] = Relationship(back_populates="items")

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity
