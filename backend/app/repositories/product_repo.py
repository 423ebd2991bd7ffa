from typing import List, Optional

from app.models.product import Product
from sqlalchemy.orm import Session


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.id == product_id).first()

    def get_for_update(self, product_id: str) -> Optional[Product]:
        """Load the product and hold its row lock until the transaction ends."""
        return (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .with_for_update()
            .first()
        )

    def list(self, q: Optional[str] = None, category: Optional[str] = None) -> List[Product]:
        query = self.db.query(Product)
        if category:
            query = query.filter(Product.category == category)
        if q:
            like = f"%{q}%"
            query = query.filter(
                (Product.name.ilike(like)) | (Product.description.ilike(like))
            )
        return query.order_by(Product.name).all()

    def create(
        self,
        name: str,
        category: str,
        price,
        stock: int = 0,
        wholesale_price=None,
        description: str = None,
        image: str = None,
    ) -> Product:
        p = Product(
            name=name,
            category=category,
            price=price,
            wholesale_price=wholesale_price,
            stock=stock,
            description=description,
            image=image,
        )
        self.db.add(p)
        self.db.flush()
        return p

    def delete(self, product: Product):
        self.db.delete(product)
        self.db.flush()
