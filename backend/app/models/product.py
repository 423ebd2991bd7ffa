from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, Integer, Numeric, String, Text

from app.db import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    wholesale_price = Column(Numeric(12, 2), nullable=True)
    image = Column(String(512), nullable=True)
    stock = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<Product id={self.id} name={self.name} stock={self.stock}>"
