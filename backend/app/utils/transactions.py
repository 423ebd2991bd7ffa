from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session, SessionTransactionOrigin

from app.utils.logging import get_logger

log = get_logger("tx")


def _settle_autobegun(session: Session) -> None:
    # a transaction the session opened on its own for a read (autobegin) is not a
    # unit of work; nesting in it would leave our writes to whoever closes the session
    tx = session.get_transaction()
    if tx is not None and tx.origin is SessionTransactionOrigin.AUTOBEGIN:
        session.commit()


@contextmanager
def smart_transaction(session: Session) -> Iterator[Session]:
    """
    Unit of work over ``session``.

    Begins a transaction, or a SAVEPOINT (begin_nested) when the session is
    inside one that was begun explicitly (an enclosing ``smart_transaction`` or
    ``session.begin()``). A transaction left open by earlier reads is committed
    first, so work done here is committed when the block exits even on a
    session that already loaded objects. Rolls back when an exception escapes
    the block; the exception is re-raised.

    Usage:
        with smart_transaction(db):
            ... DB work ...
    """
    _settle_autobegun(session)
    nested = session.in_transaction()
    scope = session.begin_nested() if nested else session.begin()
    try:
        with scope:
            yield session
    except Exception as e:
        log.debug("Rolled back %s: %s", "savepoint" if nested else "transaction", type(e).__name__)
        raise
