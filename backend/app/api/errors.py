from fastapi import HTTPException

from app.services.errors import OrderServiceException


def to_http(e: OrderServiceException) -> HTTPException:
    """Map a core failure to its HTTP status; the message is already caller-safe."""
    return HTTPException(status_code=e.status_code, detail=e.message)
