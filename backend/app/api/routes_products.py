from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.repositories.product_repo import ProductRepository
from app.schemas.product_schema import ProductIn, ProductOut
from app.utils.transactions import smart_transaction

router = APIRouter(tags=["products"])


def _product_json(p) -> dict:
    return ProductOut.model_validate(p).model_dump(mode="json", by_alias=True)


@router.get("", summary="List products")
def list_products(
    q: Optional[str] = Query(None, description="search term"),
    category: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    repo = ProductRepository(db)
    return [_product_json(p) for p in repo.list(q=q, category=category)]


@router.get("/{product_id}", summary="Get product by id")
def get_product(product_id: str, db: Session = Depends(get_db)):
    repo = ProductRepository(db)
    p = repo.get(product_id)
    if not p:
        raise HTTPException(status_code=404, detail="المنتج غير موجود")
    return _product_json(p)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Add a product")
def create_product(payload: ProductIn, db: Session = Depends(get_db)):
    repo = ProductRepository(db)
    with smart_transaction(db):
        p = repo.create(**payload.model_dump())
        product_id = p.id
    return _product_json(repo.get(product_id))


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a product")
def delete_product(product_id: str, db: Session = Depends(get_db)):
    repo = ProductRepository(db)
    with smart_transaction(db):
        p = repo.get(product_id)
        if not p:
            raise HTTPException(status_code=404, detail="المنتج غير موجود")
        repo.delete(p)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
