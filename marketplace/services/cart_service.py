# marketplace/services/cart_service.py
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete
from sqlmodel import Session, select

from marketplace.exceptions import BookNotAvailable, CartLineNotFound
from marketplace.models.book import Book
from marketplace.models.cart import CartItem


def get_cart(session: Session, buyer_id: str) -> dict:
    rows = session.exec(
        select(CartItem, Book)
        .join(Book, CartItem.book_id == Book.id)
        .where(CartItem.buyer_id == buyer_id)
        .order_by(CartItem.created_at, CartItem.id)
    ).all()

    items = []
    total = Decimal("0")

    for cart_item, book in rows:
        line_total = book.price * cart_item.quantity
        total += line_total
        items.append({
            "cart_item_id": cart_item.id,
            "book_id": book.id,
            "seller_id": book.seller_id,
            "title": book.title,
            "price": book.price,
            "quantity": cart_item.quantity,
            "stock": book.stock,
            "line_total": line_total,
        })

    return {"items": items, "total": total}


def add_to_cart(session: Session, buyer_id: str, book_id: str, quantity: int = 1) -> CartItem:
    """Insert a line, or merge into the buyer's existing line for that book."""
    book = session.get(Book, book_id)
    if not book or not book.is_active or not book.in_stock:
        raise BookNotAvailable("Book not available")

    existing_item = session.exec(
        select(CartItem).where(
            CartItem.buyer_id == buyer_id,
            CartItem.book_id == book_id
        )
    ).first()

    if existing_item:
        existing_item.quantity += quantity
        session.add(existing_item)
        return existing_item

    item = CartItem(buyer_id=buyer_id, book_id=book_id, quantity=quantity)
    session.add(item)
    return item


def _owned_line(session: Session, buyer_id: str, item_id: str) -> CartItem:
    item = session.get(CartItem, item_id)
    if not item or item.buyer_id != buyer_id:
        raise CartLineNotFound("Cart item not found")
    return item


def update_quantity(session: Session, buyer_id: str, item_id: str, quantity: int) -> CartItem:
    item = _owned_line(session, buyer_id, item_id)

    book: Optional[Book] = session.get(Book, item.book_id)
    if not book or not book.is_active or book.stock < quantity:
        raise BookNotAvailable("Not enough stock available")

    item.quantity = quantity
    session.add(item)
    return item


def remove_line(session: Session, buyer_id: str, item_id: str) -> None:
    session.delete(_owned_line(session, buyer_id, item_id))


def clear_cart(session: Session, buyer_id: str) -> int:
    """Delete every line of the buyer's cart. Does not commit."""
    result = session.exec(
        delete(CartItem).where(CartItem.buyer_id == buyer_id)
    )
    return result.rowcount
