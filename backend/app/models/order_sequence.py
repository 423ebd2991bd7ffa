from sqlalchemy import Column, Integer, String

from app.db import Base


class OrderSequence(Base):
    """Named monotonic counter; one row per sequence, locked while it is advanced."""

    __tablename__ = "order_sequences"
    name = Column(String(32), primary_key=True)
    last_value = Column(Integer, nullable=False, default=0)
