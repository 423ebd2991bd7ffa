# backend/app/schemas/product_schema.py
from decimal import Decimal
from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel, Money


class ProductIn(CamelModel):
    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    price: Decimal = Field(..., ge=0)
    wholesale_price: Optional[Decimal] = Field(None, ge=0)
    stock: int = Field(0, ge=0)
    description: Optional[str] = None
    image: Optional[str] = None


class ProductOut(CamelModel):
    id: str
    name: str
    category: str
    price: Money
    wholesale_price: Optional[Money] = None
    stock: int
    description: Optional[str] = None
    image: Optional[str] = None
