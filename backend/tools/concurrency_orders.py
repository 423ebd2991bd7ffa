"""
Fire concurrent order requests at a running server and report what the
stock and order-number invariants look like afterwards.

    python tools/concurrency_orders.py --product <id> --workers 8 --qty 1
"""
import argparse
import concurrent.futures
import json
import os

import requests

BASE = os.environ.get("PW_BASE", "http://127.0.0.1:4000")


def order_task(i, payload):
    try:
        r = requests.post(f"{BASE}/api/orders", json=payload, timeout=20)
        return (i, r.status_code, r.text)
    except Exception as e:
        return (i, "ERR", str(e))


def run(workers, product_id, qty):
    product = requests.get(f"{BASE}/api/products/{product_id}", timeout=10).json()
    print(f"Before: stock={product['stock']} workers={workers} qty={qty}")

    payload = {
        "customerName": "concurrency-test",
        "items": [
            {
                "productId": product_id,
                "productName": product["name"],
                "quantity": qty,
                "unitPrice": product["price"],
                "totalPrice": product["price"] * qty,
                "saleType": "تجزئة",
            }
        ],
        "totalAmount": product["price"] * qty,
        "status": "قيد الانتظار",
        "paymentMethod": "نقداً",
        "saleType": "تجزئة",
    }
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(order_task, i, payload) for i in range(workers)]
        results = [f.result() for f in futures]

    numbers = []
    for i, code, body in sorted(results):
        print((i, code, body[:120]))
        if code == 201:
            numbers.append(int(json.loads(body)["orderNumber"]))

    after = requests.get(f"{BASE}/api/products/{product_id}", timeout=10).json()
    print("Created:", len(numbers), "order numbers:", sorted(numbers))
    print("Duplicate numbers:", len(numbers) - len(set(numbers)))
    print(f"After: stock={after['stock']} (expected {product['stock'] - qty * len(numbers)})")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrent order creation check.")
    parser.add_argument("--product", required=True, help="product id to order")
    parser.add_argument("--workers", type=int, default=8)
    parser.add_argument("--qty", type=int, default=1)
    args = parser.parse_args()
    run(args.workers, args.product, args.qty)
