ALLOWED_TRANSITIONS = {
    "pending": ["paid", "cancelled"],
    "paid": ["refunded"],
    "cancelled": [],
    "refunded": []
}

# timestamp column stamped when an order enters the status
STATUS_TIMESTAMPS = {
    "paid": "paid_at",
    "cancelled": "cancelled_at",
    "refunded": "refunded_at",
}
