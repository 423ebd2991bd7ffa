class OrderServiceException(Exception):
    """Base class for failures surfaced by the order/invoice core."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(OrderServiceException):
    """Missing or malformed request fields; the caller can fix and retry."""

    status_code = 400


class InsufficientStockError(OrderServiceException):
    status_code = 400

    def __init__(self, product_id: str, product_name: str = None, available: int = 0):
        self.product_id = product_id
        self.product_name = product_name or product_id
        self.available = available
        super().__init__(f"المخزون غير كافٍ للمنتج {self.product_name}")


class NotFoundError(OrderServiceException):
    status_code = 404


class PersistenceError(OrderServiceException):
    """Unexpected storage failure. The message is generic; details go to the log."""

    status_code = 500
