# marketplace/services/order_service.py
import logging
from decimal import Decimal
from typing import List, Optional

from sqlmodel import Session, select

from marketplace.constants.order_status import ALLOWED_TRANSITIONS, PENDING
from marketplace.exceptions import InvalidStatusTransition
from marketplace.models.order import Order
from marketplace.models.order_item import OrderItem
from marketplace.schemas.checkout_schemas import SellerLine
from marketplace.services.inventory_service import reduce_stock

logger = logging.getLogger(__name__)


def order_total(lines: List[SellerLine]) -> Decimal:
    return sum((line.price * line.quantity for line in lines), Decimal("0"))


def materialize_order(
    session: Session,
    buyer_id: str,
    seller_id: str,
    lines: List[SellerLine],
) -> str:
    """Create one seller's order, its lines and the matching stock decrements.

    Nothing is committed here; the caller owns the transaction.
    """
    order = Order(
        buyer_id=buyer_id,
        seller_id=seller_id,
        status=PENDING,
        total_price=order_total(lines),
    )
    session.add(order)
    session.flush()

    for line in lines:
        session.add(
            OrderItem(
                order_id=order.id,
                book_id=line.book_id,
                book_title=line.title,
                price=line.price,
                quantity=line.quantity,
            )
        )
        reduce_stock(session, line.book_id, line.quantity, line.title)

    session.flush()
    logger.info(
        f"Order {order.id} created for seller {seller_id}: "
        f"{len(lines)} item(s), total {order.total_price}"
    )
    return order.id


def get_order_items(session: Session, order_id: str) -> List[OrderItem]:
    return session.exec(
        select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.book_title)
    ).all()


def list_orders(session: Session, buyer_id: Optional[str] = None, seller_id: Optional[str] = None) -> List[Order]:
    statement = select(Order)
    if buyer_id:
        statement = statement.where(Order.buyer_id == buyer_id)
    if seller_id:
        statement = statement.where(Order.seller_id == seller_id)

    return session.exec(statement.order_by(Order.created_at.desc())).all()


def change_status(session: Session, order: Order, status: str) -> Order:
    if status not in ALLOWED_TRANSITIONS.get(order.status, []):
        raise InvalidStatusTransition(order.status, status)

    order.status = status
    session.add(order)
    return order
