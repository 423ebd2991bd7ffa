import sqlite3
import sys

DB = sys.argv[1] if len(sys.argv) > 1 else "dev.db"
ORDER_NUMBER = sys.argv[2] if len(sys.argv) > 2 else None

conn = sqlite3.connect(DB)
cur = conn.cursor()

print("=== Order sequence ===")
cur.execute("SELECT name, last_value FROM order_sequences")
for r in cur.fetchall():
    print(r)

print("\n=== Recent Orders ===")
if ORDER_NUMBER:
    cur.execute(
        "SELECT id, order_number, status, total_amount, order_date, delivery_date FROM orders WHERE order_number=?",
        (ORDER_NUMBER,),
    )
else:
    cur.execute(
        "SELECT id, order_number, status, total_amount, order_date, delivery_date FROM orders ORDER BY order_date DESC LIMIT 20"
    )
orders = cur.fetchall()
for r in orders:
    print(r)

if ORDER_NUMBER and orders:
    print(f"\n=== Items for order {ORDER_NUMBER} ===")
    cur.execute(
        "SELECT line_no, product_id, product_name, quantity, unit_price, total_price FROM order_items WHERE order_id=? ORDER BY line_no",
        (orders[0][0],),
    )
    for r in cur.fetchall():
        print(r)

print("\n=== Recent Invoices ===")
cur.execute(
    "SELECT invoice_number, order_id, issue_date, due_date, total_amount, is_paid FROM invoices ORDER BY issue_date DESC LIMIT 20"
)
for r in cur.fetchall():
    print(r)

print("\n=== Products at or below zero stock ===")
cur.execute("SELECT id, name, stock FROM products WHERE stock <= 0")
for r in cur.fetchall():
    print(r)

conn.close()
