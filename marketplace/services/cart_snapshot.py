from typing import List

from sqlmodel import Session, select

from marketplace.models.book import Book
from marketplace.models.cart import CartItem
from marketplace.schemas.checkout_schemas import CartSnapshotLine


def read_cart_snapshot(session: Session, buyer_id: str) -> List[CartSnapshotLine]:
    """Buyer's cart joined with the current book rows.

    Must run on the checkout's own session: the book rows are locked
    (``FOR UPDATE``) so the stock read here is the stock that gets validated
    and decremented before commit.
    """
    rows = session.exec(
        select(CartItem, Book)
        .join(Book, CartItem.book_id == Book.id)
        .where(CartItem.buyer_id == buyer_id)
        .order_by(CartItem.created_at, CartItem.id)
        .with_for_update(of=Book)
    ).all()

    return [
        CartSnapshotLine(
            cart_line_id=cart_item.id,
            book_id=book.id,
            seller_id=book.seller_id,
            title=book.title,
            price=book.price,
            quantity=cart_item.quantity,
            stock=book.stock,
            is_active=book.is_active,
        )
        for cart_item, book in rows
    ]
