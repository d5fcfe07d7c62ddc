# app/domain/errors.py
"""
Wyjatki domenowe. Kazdy niesie kod bledu API i status HTTP,
warstwa API tylko je formatuje.
"""


class ServiceError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class CartEmptyError(ServiceError, ValueError):
    code = "CART_EMPTY"
    status_code = 400

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class OrderNotFoundError(ServiceError, LookupError):
    code = "ORDER_NOT_FOUND"
    status_code = 404

    def __init__(self, message: str = "Order not found"):
        super().__init__(message)


class OrderNotCancellableError(ServiceError, ValueError):
    code = "ORDER_NOT_CANCELLABLE"
    status_code = 409

    def __init__(self, message: str = "Order cannot be cancelled"):
        super().__init__(message)


class InvalidStatusTransitionError(ServiceError, ValueError):
    code = "INVALID_STATUS_TRANSITION"
    status_code = 409

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot change order status from {current} to {requested}",
            details={"current": current, "requested": requested},
        )


class CheckoutInProgressError(ServiceError, RuntimeError):
    code = "CHECKOUT_IN_PROGRESS"
    status_code = 409

    def __init__(self, message: str = "A checkout for this cart is already in progress"):
        super().__init__(message)


class RateLimitExceededError(ServiceError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429

    def __init__(self, retry_after: int):
        super().__init__("Too many requests", details={"retry_after": retry_after})
        self.retry_after = retry_after


class PersistenceError(ServiceError, RuntimeError):
    #szczegoly tylko w logach, klient dostaje ogolny komunikat
    code = "DATABASE_ERROR"
    status_code = 500
