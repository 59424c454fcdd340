import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from marketplace.database import get_db, get_session
from marketplace.exceptions import (
    EmptyCart,
    InsufficientStock,
    InvalidStatusTransition,
    StorageUnavailable,
)
from marketplace.models.order import Order
from marketplace.models.user import User
from marketplace.schemas.checkout_schemas import CheckoutResponse
from marketplace.schemas.orders_schemas import OrderOut, OrderStatusUpdate
from marketplace.services.checkout_service import create_order
from marketplace.services.db_service import DatabaseService
from marketplace.services import order_service
from marketplace.utils.token import get_current_user, require_buyer, require_seller

logger = logging.getLogger(__name__)

router = APIRouter()


def _order_out(session: Session, order: Order) -> dict:
    items = order_service.get_order_items(session, order.id)
    return {
        "id": order.id,
        "buyer_id": order.buyer_id,
        "seller_id": order.seller_id,
        "status": order.status,
        "total_price": order.total_price,
        "created_at": order.created_at,
        "items": [
            {
                "id": i.id,
                "book_id": i.book_id,
                "book_title": i.book_title,
                "price": i.price,
                "quantity": i.quantity,
                "line_total": i.line_total,
            }
            for i in items
        ],
    }

# Checkout: whole cart -> one order per seller

@router.post("", status_code=201, response_model=CheckoutResponse)
def checkout(
    db: DatabaseService = Depends(get_db),
    current_user: User = Depends(require_buyer)
):
    try:
        order_ids = create_order(db, current_user.id)
    except (EmptyCart, InsufficientStock) as e:
        raise HTTPException(400, str(e))
    except StorageUnavailable:
        raise HTTPException(503, "Service temporarily unavailable, please retry later")
    except Exception:
        raise HTTPException(500, "Server error during order creation")

    return {"message": "Order created successfully", "order_ids": order_ids}

# Buyer orders

@router.get("", response_model=list[OrderOut])
def get_buyer_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_buyer)
):
    orders = order_service.list_orders(session, buyer_id=current_user.id)
    return [_order_out(session, o) for o in orders]

# Seller orders

@router.get("/seller", response_model=list[OrderOut])
def get_seller_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_seller)
):
    orders = order_service.list_orders(session, seller_id=current_user.id)
    return [_order_out(session, o) for o in orders]


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    order = session.get(Order, order_id)

    if not order or current_user.id not in (order.buyer_id, order.seller_id):
        raise HTTPException(404, "Order not found")

    return _order_out(session, order)


@router.put("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_seller)
):
    if not data.is_known():
        raise HTTPException(400, "Invalid status")

    order = session.get(Order, order_id)
    if not order or order.seller_id != current_user.id:
        raise HTTPException(404, "Order not found")

    try:
        order_service.change_status(session, order, data.status)
    except InvalidStatusTransition as e:
        raise HTTPException(400, str(e))

    session.commit()
    session.refresh(order)
    logger.info(f"Order {order.id} moved to {order.status}")

    return _order_out(session, order)
