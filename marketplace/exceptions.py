"""Errors raised by the checkout core and its collaborators.

Logical failures (``CheckoutError`` and friends) are deterministic for a given
cart and are never retried. ``StorageUnavailable`` is raised only once the
resilient data access layer has given up on a transient store failure.
"""
from typing import Optional


class MarketplaceError(Exception):
    """Base class for all marketplace errors."""


class CheckoutError(MarketplaceError):
    """A checkout was rejected for a business reason."""


class EmptyCart(CheckoutError):
    def __init__(self, buyer_id: str):
        self.buyer_id = buyer_id
        super().__init__("No items in cart")


class InsufficientStock(CheckoutError):
    def __init__(self, title: str, requested: Optional[int] = None, available: Optional[int] = None):
        self.title = title
        self.requested = requested
        self.available = available
        super().__init__(f"Not enough stock for {title}")


class StorageUnavailable(MarketplaceError):
    """The store kept failing transiently until the retry budget ran out."""

    def __init__(self, last_error: BaseException, attempts: int):
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(
            f"Storage unavailable after {attempts} attempt(s): {last_error}"
        )


class InvalidStatusTransition(MarketplaceError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change order status from {current} to {requested}")


class CartLineNotFound(MarketplaceError):
    """The cart line does not exist or belongs to another buyer."""


class BookNotAvailable(MarketplaceError):
    """The book cannot be added, or not in the requested quantity."""
