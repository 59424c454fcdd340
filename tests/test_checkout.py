"""Checkout end to end against the store: atomicity, partitioning, retries."""

from decimal import Decimal

import pytest
from sqlmodel import Session

from marketplace.exceptions import EmptyCart, InsufficientStock, StorageUnavailable
from marketplace.models.book import Book
from marketplace.models.order import Order
from marketplace.services import order_service
from marketplace.services.checkout_service import create_order
from marketplace.services.db_service import DatabaseService
from tests.factories import (
    FlakySessions,
    add_line,
    all_order_items,
    all_orders,
    cart_of,
    items_of,
    make_book,
    stock_of,
)


@pytest.fixture()
def two_seller_cart(engine, buyer, seller_a, seller_b):
    """Cart with lines across sellers {A, A, B}."""
    a1 = make_book(engine, seller_a, title="A1", price="10.00", stock=5)
    a2 = make_book(engine, seller_a, title="A2", price="4.50", stock=3)
    b1 = make_book(engine, seller_b, title="B1", price="7.25", stock=1)
    add_line(engine, buyer, a1, 2)
    add_line(engine, buyer, b1, 1)
    add_line(engine, buyer, a2, 3)
    return a1, a2, b1


class TestCreateOrderHappyPath:

    def test_one_order_per_seller(self, db, engine, buyer, seller_a, seller_b, two_seller_cart):
        order_ids = create_order(db, buyer.id)

        assert len(order_ids) == 2
        with Session(engine) as session:
            first, second = (session.get(Order, oid) for oid in order_ids)

        # sellers in first-seen cart order
        assert first.seller_id == seller_a.id
        assert second.seller_id == seller_b.id
        assert first.total_price == Decimal("33.50")
        assert second.total_price == Decimal("7.25")
        assert [i.book_title for i in items_of(engine, first.id)] == ["A1", "A2"]
        assert [i.book_title for i in items_of(engine, second.id)] == ["B1"]

    def test_total_is_sum_of_own_lines(self, db, engine, buyer, two_seller_cart):
        for order_id in create_order(db, buyer.id):
            items = items_of(engine, order_id)
            with Session(engine) as session:
                total = session.get(Order, order_id).total_price
            assert total == sum(i.price * i.quantity for i in items)

    def test_decrements_stock(self, db, engine, buyer, two_seller_cart):
        a1, a2, b1 = two_seller_cart
        create_order(db, buyer.id)

        assert stock_of(engine, a1) == 3
        assert stock_of(engine, a2) == 0
        assert stock_of(engine, b1) == 0

    def test_clears_the_cart(self, db, engine, buyer, two_seller_cart):
        create_order(db, buyer.id)
        assert cart_of(engine, buyer) == []

    def test_price_is_snapshotted(self, db, engine, buyer, book_x):
        add_line(engine, buyer, book_x, 1)
        [order_id] = create_order(db, buyer.id)

        with Session(engine) as session:
            book = session.get(Book, book_x.id)
            book.price = Decimal("99.99")
            session.add(book)
            session.commit()

        [item] = items_of(engine, order_id)
        assert item.price == Decimal("10.00")
        with Session(engine) as session:
            assert session.get(Order, order_id).total_price == Decimal("10.00")


class TestCreateOrderFailures:

    def test_empty_cart(self, db, engine, buyer, sleeps):
        with pytest.raises(EmptyCart):
            create_order(db, buyer.id)

        assert all_orders(engine) == []
        assert sleeps == []

    def test_insufficient_stock_rolls_back_every_seller(self, db, engine, buyer, seller_a, seller_b, sleeps):
        x = make_book(engine, seller_a, title="X", price="10.00", stock=5)
        y = make_book(engine, seller_b, title="Y", price="5.00", stock=0)
        add_line(engine, buyer, x, 2)
        add_line(engine, buyer, y, 1)

        with pytest.raises(InsufficientStock) as exc_info:
            create_order(db, buyer.id)

        assert exc_info.value.title == "Y"
        assert all_orders(engine) == []
        assert stock_of(engine, x) == 5
        assert len(cart_of(engine, buyer)) == 2
        # logical failures are not retried
        assert sleeps == []

    def test_failure_in_later_seller_undoes_earlier_sellers(
        self, db, engine, buyer, monkeypatch, two_seller_cart
    ):
        a1, a2, b1 = two_seller_cart
        real_reduce_stock = order_service.reduce_stock

        def reduce_stock(session, book_id, quantity, title):
            if book_id == b1.id:
                raise RuntimeError("disk full")
            real_reduce_stock(session, book_id, quantity, title)

        monkeypatch.setattr(order_service, "reduce_stock", reduce_stock)

        with pytest.raises(RuntimeError):
            create_order(db, buyer.id)

        assert all_orders(engine) == []
        assert all_order_items(engine) == []
        assert [stock_of(engine, b) for b in (a1, a2, b1)] == [5, 3, 1]
        assert len(cart_of(engine, buyer)) == 3


class TestCreateOrderRetries:

    def test_survives_two_refused_connections(self, engine, policy, sleeps, buyer, two_seller_cart):
        sessions = FlakySessions(engine, connect_failures=2)
        db = DatabaseService(engine, policy, session_factory=sessions)

        order_ids = create_order(db, buyer.id)

        assert len(order_ids) == 2
        assert sorted(o.id for o in all_orders(engine)) == sorted(order_ids)
        assert sessions.acquired == 3
        assert sleeps == [1, 2]

    def test_lost_commit_does_not_duplicate_orders(self, engine, policy, buyer, two_seller_cart):
        a1, a2, b1 = two_seller_cart
        sessions = FlakySessions(engine, commit_failures=1)
        db = DatabaseService(engine, policy, session_factory=sessions)

        order_ids = create_order(db, buyer.id)

        assert sorted(o.id for o in all_orders(engine)) == sorted(order_ids)
        assert len(all_order_items(engine)) == 3
        assert [stock_of(engine, b) for b in (a1, a2, b1)] == [3, 0, 0]
        assert cart_of(engine, buyer) == []

    def test_storage_unavailable_leaves_state_untouched(self, engine, policy, buyer, two_seller_cart):
        a1, a2, b1 = two_seller_cart
        sessions = FlakySessions(engine, commit_failures=3)
        db = DatabaseService(engine, policy, session_factory=sessions)

        with pytest.raises(StorageUnavailable):
            create_order(db, buyer.id)

        assert all_orders(engine) == []
        assert [stock_of(engine, b) for b in (a1, a2, b1)] == [5, 3, 1]
        assert len(cart_of(engine, buyer)) == 3
