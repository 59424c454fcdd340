from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlmodel import Session, or_, select

from marketplace.database import get_session
from marketplace.models.book import Book
from marketplace.models.user import User
from marketplace.schemas.book_schemas import BookCreate, BookOut, BookUpdate
from marketplace.utils.clock import utc_now
from marketplace.utils.token import require_seller

router = APIRouter()


def _owned_book(session: Session, book_id: str, seller: User) -> Book:
    book = session.get(Book, book_id)
    if not book:
        raise HTTPException(404, "Book not found")
    if book.seller_id != seller.id:
        raise HTTPException(403, "Not authorized to modify this book")
    return book


@router.get("")
def list_books(
    search: str = "",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    session: Session = Depends(get_session),
):
    query = select(Book).where(Book.is_active == True)  # noqa: E712

    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Book.title.ilike(pattern), Book.description.ilike(pattern)))

    total = session.exec(
        select(func.count()).select_from(query.subquery())
    ).one()

    books = session.exec(
        query.order_by(Book.created_at.desc()).offset((page - 1) * limit).limit(limit)
    ).all()

    return {
        "total_items": total,
        "total_pages": (total + limit - 1) // limit,
        "current_page": page,
        "limit": limit,
        "results": [BookOut.model_validate(b) for b in books],
    }


@router.get("/{book_id}", response_model=BookOut)
def get_book(book_id: str, session: Session = Depends(get_session)):
    book = session.get(Book, book_id)
    if not book:
        raise HTTPException(404, "Book not found")
    return book


@router.post("", status_code=201, response_model=BookOut)
def create_book(
    data: BookCreate,
    session: Session = Depends(get_session),
    seller: User = Depends(require_seller),
):
    book = Book(seller_id=seller.id, **data.model_dump())

    session.add(book)
    session.commit()
    session.refresh(book)

    return book


@router.put("/{book_id}", response_model=BookOut)
def update_book(
    book_id: str,
    data: BookUpdate,
    session: Session = Depends(get_session),
    seller: User = Depends(require_seller),
):
    book = _owned_book(session, book_id, seller)

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(book, key, value)
    book.updated_at = utc_now()

    session.add(book)
    session.commit()
    session.refresh(book)

    return book


# Soft delete: existing orders keep pointing at the row
@router.delete("/{book_id}")
def deactivate_book(
    book_id: str,
    session: Session = Depends(get_session),
    seller: User = Depends(require_seller),
):
    book = _owned_book(session, book_id, seller)

    book.is_active = False
    book.updated_at = utc_now()
    session.add(book)
    session.commit()

    return {"message": "Book removed"}
