import re
from typing import Optional

from sqlalchemy.orm import Session

from app.models.order import Order
from app.models.order_sequence import OrderSequence
from app.utils.logging import get_logger

log = get_logger("sequence")

ORDER_SEQUENCE = "orders"
# file-lock name guarding the counter row; see app.utils.locks.named_locks
ORDER_SEQUENCE_LOCK = "order-sequence"

_TRAILING_DIGITS = re.compile(r"(\d+)$")


def extract_sequence_value(order_number: Optional[str]) -> Optional[int]:
    """
    Numeric part of an order number: ``"17"`` -> 17, legacy ``"ORD-0042"`` -> 42.
    Returns None when the value has no trailing digit run.
    """
    if not order_number:
        return None
    m = _TRAILING_DIGITS.search(order_number.strip())
    if not m:
        return None
    return int(m.group(1))


class OrderNumberSequencer:
    """
    Hands out short sequential order numbers ("1", "2", ...).

    The last issued value lives in a single locked counter row, so numbers keep
    increasing after deletions and two writers cannot read the same maximum.
    The first call on a database without the row seeds it from the highest
    number already present in ``orders``.

    Must be called inside the transaction that inserts the order: the counter
    advance commits or rolls back together with it.
    """

    def __init__(self, db: Session):
        self.db = db

    def _scan_existing_max(self) -> int:
        """Largest numeric order number on file; values without trailing digits are skipped, not treated as a restart."""
        values = [
            extract_sequence_value(n)
            for (n,) in self.db.query(Order.order_number).all()
        ]
        return max((v for v in values if v is not None), default=0)

    def _locked_counter(self) -> OrderSequence:
        seq = (
            self.db.query(OrderSequence)
            .filter(OrderSequence.name == ORDER_SEQUENCE)
            .with_for_update()
            .first()
        )
        if seq is None:
            start = self._scan_existing_max()
            log.info("Seeding order sequence at %s from existing orders", start)
            seq = OrderSequence(name=ORDER_SEQUENCE, last_value=start)
            self.db.add(seq)
            self.db.flush()
        return seq

    def current_value(self) -> int:
        seq = (
            self.db.query(OrderSequence)
            .filter(OrderSequence.name == ORDER_SEQUENCE)
            .first()
        )
        return seq.last_value if seq is not None else self._scan_existing_max()

    def next_number(self) -> str:
        seq = self._locked_counter()
        seq.last_value = seq.last_value + 1
        self.db.flush()
        return str(seq.last_value)
