#!/usr/bin/env python3
"""
Seed the product catalogue from a JSON file.

The file may be a list of product entries or an object with an ``items`` list.
Entries are matched on name: existing products get their price/stock updated,
new ones are inserted. Without a file a small default catalogue is used.

Usage:
    python scripts/seed_products.py --file catalogue.json
"""
import argparse
import json
import os
import sys
from decimal import Decimal, InvalidOperation

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.db import SessionLocal, init_db
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.utils.logging import get_logger
from app.utils.transactions import smart_transaction

log = get_logger("seed")

DEFAULT_CATALOGUE = [
    {"name": "مياه 330 مل", "category": "مياه", "price": "0.50", "wholesalePrice": "0.35", "stock": 500},
    {"name": "مياه 1.5 لتر", "category": "مياه", "price": "1.00", "wholesalePrice": "0.75", "stock": 300},
    {"name": "جالون 19 لتر", "category": "مياه", "price": "5.00", "wholesalePrice": "4.00", "stock": 120},
    {"name": "كيس ثلج 5 كجم", "category": "ثلج", "price": "3.00", "stock": 80},
    {"name": "آيس كريم فانيلا", "category": "آيس كريم", "price": "2.50", "stock": 60},
]


def _money(value, default=None):
    if value is None or value == "":
        return default
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return default


def _normalize_entry(entry):
    """Accept camelCase or snake_case keys; return kwargs for ProductRepository.create."""
    return {
        "name": (entry.get("name") or "").strip(),
        "category": entry.get("category") or "منتجات أخرى",
        "price": _money(entry.get("price"), Decimal("0")),
        "wholesale_price": _money(entry.get("wholesalePrice", entry.get("wholesale_price"))),
        "stock": int(entry.get("stock", 0) or 0),
        "description": entry.get("description"),
        "image": entry.get("image"),
    }


def load_entries(path=None):
    if not path:
        return list(DEFAULT_CATALOGUE)
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        return data.get("items", list(data.values()))
    return data if isinstance(data, list) else []


def seed(entries):
    init_db()
    db = SessionLocal()
    repo = ProductRepository(db)
    created = updated = 0
    try:
        with smart_transaction(db):
            for entry in entries:
                fields = _normalize_entry(entry)
                if not fields["name"]:
                    continue
                p = db.query(Product).filter(Product.name == fields["name"]).first()
                if p:
                    for k, v in fields.items():
                        setattr(p, k, v)
                    updated += 1
                else:
                    repo.create(**fields)
                    created += 1
        log.info("Seeded products: %d created, %d updated", created, updated)
    finally:
        db.close()
    return created, updated


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", default=None, help="Path to product json (list or {items: [...]})")
    args = parser.parse_args()
    if args.file and not os.path.exists(args.file):
        print("File not found:", args.file)
        sys.exit(1)
    seed(load_entries(args.file))
