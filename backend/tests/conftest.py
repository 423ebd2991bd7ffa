import os
import tempfile

# point the app at a throwaway database before anything imports app.config
_tmp = tempfile.mkdtemp(prefix="purewater-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_tmp, 'test.db')}"
os.environ["LOCK_DIR"] = os.path.join(_tmp, "locks")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal

import pytest

from app.db import SessionLocal, init_db
from app.models.product import Product


@pytest.fixture(autouse=True)
def fresh_db():
    init_db(reset=True)
    yield


@pytest.fixture
def make_product():
    """Insert a committed product and return its id."""

    def _make(name="مياه 1.5 لتر", stock=5, price="1.00", category="مياه"):
        db = SessionLocal()
        try:
            p = Product(name=name, category=category, price=Decimal(price), stock=stock)
            db.add(p)
            db.commit()
            return p.id
        finally:
            db.close()

    return _make
