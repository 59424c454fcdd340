# marketplace/services/inventory_service.py
import logging
from typing import Iterable

from sqlalchemy import update
from sqlmodel import Session

from marketplace.exceptions import InsufficientStock
from marketplace.models.book import Book
from marketplace.schemas.checkout_schemas import CartSnapshotLine
from marketplace.utils.clock import utc_now

logger = logging.getLogger(__name__)


def available_stock(line: CartSnapshotLine) -> int:
    # a deactivated listing can no longer be bought
    return line.stock if line.is_active else 0


def validate_stock(lines: Iterable[CartSnapshotLine]) -> None:
    """All-or-nothing: the first line asking for more than is available aborts the checkout."""
    for line in lines:
        available = available_stock(line)
        if line.quantity > available:
            logger.info(
                f"Insufficient stock for {line.title}. "
                f"Available: {available}, Requested: {line.quantity}"
            )
            raise InsufficientStock(line.title, line.quantity, available)


def reduce_stock(session: Session, book_id: str, quantity: int, title: str) -> None:
    """Decrement a book's stock inside the caller's transaction.

    The ``stock >= quantity`` guard keeps stock non-negative even if the row
    changed since the snapshot was read.
    """
    result = session.exec(
        update(Book)
        .where(Book.id == book_id, Book.stock >= quantity)
        .values(stock=Book.stock - quantity, updated_at=utc_now())
    )

    if result.rowcount != 1:
        raise InsufficientStock(title, quantity)
