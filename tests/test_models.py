"""Table models: timestamp defaults and column types."""

from datetime import timedelta

import pytest
from sqlmodel import Session

from marketplace.models.book import Book
from marketplace.models.cart import CartItem
from marketplace.models.order import Order
from marketplace.models.user import User
from marketplace.services.inventory_service import reduce_stock
from tests.factories import make_book


class TestTimestamps:

    @pytest.mark.parametrize("model, column", [
        (User, "created_at"),
        (Book, "created_at"),
        (Book, "updated_at"),
        (CartItem, "created_at"),
        (Order, "created_at"),
    ])
    def test_columns_store_timezone(self, model, column):
        assert model.__table__.c[column].type.timezone is True

    def test_defaults_are_aware_utc(self):
        user = User(name="Ann", email="ann@example.com")
        book = Book(seller_id="s1", title="Dune", price="1.00")

        for value in (user.created_at, book.created_at, book.updated_at):
            assert value.tzinfo is not None
            assert value.utcoffset() == timedelta(0)

    def test_stock_decrement_stamps_updated_at(self, engine, seller_a):
        book = make_book(engine, seller_a, title="Dune", stock=3)

        with Session(engine) as session:
            reduce_stock(session, book.id, 1, book.title)
            session.commit()

        with Session(engine) as session:
            stored = session.get(Book, book.id)
            assert stored.stock == 2
            # SQLite hands timestamps back without an offset
            assert stored.updated_at.replace(tzinfo=None) >= book.updated_at.replace(tzinfo=None)
