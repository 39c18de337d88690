"""Error types raised by the store operations and mapped to HTTP statuses in main.py."""


class StoreError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(StoreError):
    status_code = 404


class ValidationFailure(StoreError):
    status_code = 400


class InsufficientStock(ValidationFailure):
    def __init__(self, name: str, available: int):
        super().__init__(f"Insufficient stock for {name}. Available: {available}")
        self.available = available


class OrderFailed(StoreError):
    status_code = 400
