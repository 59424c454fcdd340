PENDING = "pending"
SHIPPED = "shipped"
DELIVERED = "delivered"
CANCELLED = "cancelled"

ALLOWED_TRANSITIONS = {
    PENDING: [SHIPPED, CANCELLED],
    SHIPPED: [DELIVERED, CANCELLED],
    DELIVERED: [],
    CANCELLED: [],
}

ORDER_STATUSES = list(ALLOWED_TRANSITIONS)
