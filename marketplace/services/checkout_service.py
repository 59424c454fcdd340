# marketplace/services/checkout_service.py
"""Checkout: turn a buyer's whole cart into one pending order per seller.

All steps run on one session inside ``DatabaseService.transaction``::

    started -> snapshot_read -> validated -> partitioned
            -> materialized -> cart_cleared -> committed

Any exception rolls the whole transaction back (orders, order lines and
stock decrements of every seller group) before it reaches the caller. When
the store fails transiently the transaction is re-run from a clean snapshot,
so stock is re-validated on every attempt.
"""
import logging
from typing import Dict, Iterable, List, Optional

from sqlmodel import Session

from marketplace.exceptions import CheckoutError, EmptyCart, StorageUnavailable
from marketplace.schemas.checkout_schemas import CartSnapshotLine, SellerLine
from marketplace.services.cart_service import clear_cart
from marketplace.services.cart_snapshot import read_cart_snapshot
from marketplace.services.db_service import DatabaseService
from marketplace.services.inventory_service import validate_stock
from marketplace.services.order_service import materialize_order

logger = logging.getLogger(__name__)


def partition_by_seller(lines: Iterable[CartSnapshotLine]) -> Dict[str, List[SellerLine]]:
    """Group lines by seller, sellers in the order they first appear."""
    groups: Dict[str, List[SellerLine]] = {}

    for line in lines:
        groups.setdefault(line.seller_id, []).append(
            SellerLine(
                book_id=line.book_id,
                title=line.title,
                price=line.price,
                quantity=line.quantity,
            )
        )

    return groups


def checkout_cart(session: Session, buyer_id: str) -> List[str]:
    state = "started"
    try:
        lines = read_cart_snapshot(session, buyer_id)
        state = "snapshot_read"
        if not lines:
            raise EmptyCart(buyer_id)

        validate_stock(lines)
        state = "validated"

        groups = partition_by_seller(lines)
        state = "partitioned"

        order_ids = [
            materialize_order(session, buyer_id, seller_id, seller_lines)
            for seller_id, seller_lines in groups.items()
        ]
        state = "materialized"

        clear_cart(session, buyer_id)
        state = "cart_cleared"
    except Exception:
        logger.info(f"Checkout for buyer {buyer_id} rolled back after state '{state}'")
        raise

    return order_ids


def create_order(db: DatabaseService, buyer_id: str, max_attempts: Optional[int] = None) -> List[str]:
    """Check out the buyer's cart; returns the created order ids in seller order."""
    logger.info(f"Checkout started for buyer {buyer_id}")

    try:
        order_ids = db.transaction(
            lambda session: checkout_cart(session, buyer_id),
            max_attempts=max_attempts,
        )
    except (CheckoutError, StorageUnavailable):
        raise
    except Exception:
        logger.exception(f"Unexpected failure during checkout for buyer {buyer_id}")
        raise

    logger.info(f"Checkout committed for buyer {buyer_id}: orders {order_ids}")
    return order_ids
