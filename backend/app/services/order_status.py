from typing import Dict, FrozenSet, Optional, Union

from app.models.order import OrderStatus
from app.services.errors import ValidationError

# Any open or delivered order may be cancelled. Nothing moves back out of Delivered
# or Cancelled: reopening would need invoice reversal and restocking rules that do
# not exist. Cancelling a delivered order leaves its invoice as it is.
ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
    ),
    OrderStatus.OUT_FOR_DELIVERY: frozenset(
        {OrderStatus.PENDING, OrderStatus.DELIVERED, OrderStatus.CANCELLED}
    ),
    OrderStatus.DELIVERED: frozenset({OrderStatus.CANCELLED}),
    OrderStatus.CANCELLED: frozenset(),
}


def coerce_status(value: Union[str, OrderStatus, None]) -> Optional[OrderStatus]:
    """Map a stored or submitted value (Arabic label or member name) to OrderStatus, or None."""
    if value is None:
        return None
    if isinstance(value, OrderStatus):
        return value
    text = str(value).strip()
    try:
        return OrderStatus(text)
    except ValueError:
        pass
    key = text.upper().replace(" ", "_").replace("-", "_")
    if key == "OUTFORDELIVERY":
        key = "OUT_FOR_DELIVERY"
    return OrderStatus.__members__.get(key)


def parse_status(value) -> OrderStatus:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError("حالة الطلب مطلوبة")
    status = coerce_status(value)
    if status is None:
        raise ValidationError(f"حالة الطلب غير صالحة: {value}")
    return status


def can_transition(current: Optional[OrderStatus], target: OrderStatus) -> bool:
    # rows written before the enum existed may hold unknown labels; let them move anywhere
    if current is None or current == target:
        return True
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition_allowed(current: Optional[OrderStatus], target: OrderStatus) -> None:
    if not can_transition(current, target):
        raise ValidationError(
            f"لا يمكن تغيير حالة الطلب من '{current.value}' إلى '{target.value}'"
        )
