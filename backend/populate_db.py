import os
import random
from datetime import datetime, timedelta

# Add 'backend' folder to Python path
import sys
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from database import SessionLocal, init_db
from models.users import User
from models.product import Product, ProductComponent
from models.batch import Batch, BatchProduct
from models.expense import Expense
from models.sale import Sale, SalesLocation
from models.task import Task

# Configuration
SALES_PER_BATCH = 40
SALES_DAYS_BACK = 60
RANDOM_SEED = 7
# End Configuration

USERS = [
    ("admin@brandops.com", "Admin User", "admin"),
    ("john@brandops.com", "John Manager", "manager"),
    ("jane@brandops.com", "Jane Smith", "user"),
]

# name, description, cost, price, components
PRODUCTS = [
    ("Premium T-Shirt", "High-quality cotton t-shirt", 5.50, 19.99, [("Cotton blank", 3.50), ("Screen print", 2.00)]),
    ("Classic Hoodie", "Comfortable fleece hoodie", 12.00, 39.99, [("Fleece blank", 9.00), ("Embroidery", 3.00)]),
    ("Baseball Cap", "Adjustable baseball cap", 4.00, 14.99, [("Cap blank", 3.20), ("Patch", 0.80)]),
]

LOCATIONS = [("Downtown Store", "retail"), ("Weekend Market", "market"), ("Online Shop", "online")]

EXPENSE_TYPES = ["Marketing", "Shipping", "Packaging", "Rent"]


def populate():
    """Inserts a small, coherent data set for local development."""
    random.seed(RANDOM_SEED)
    init_db()
    session = SessionLocal()

    if session.query(Product).count():
        print("Database already has products - skipping seed.")
        session.close()
        return

    try:
        users = [User(email=email, name=name, role=role) for email, name, role in USERS]
        session.add_all(users)

        products = []
        for name, description, cost, price, components in PRODUCTS:
            product = Product(name=name, description=description, cost=cost, price=price)
            product.components = [ProductComponent(name=c_name, cost=c_cost) for c_name, c_cost in components]
            products.append(product)
        session.add_all(products)

        locations = [SalesLocation(name=name, type=kind) for name, kind in LOCATIONS]
        session.add_all(locations)
        session.flush()

        now = datetime.utcnow()
        batches = [
            Batch(name="Spring Drop", status="completed", start_date=now - timedelta(days=90), end_date=now - timedelta(days=45)),
            Batch(name="Summer Drop", status="in-progress", start_date=now - timedelta(days=30)),
        ]
        for batch in batches:
            batch.products = [
                BatchProduct(product_id=p.id, quantity=qty, cost=round(p.cost * qty, 2))
                for p, qty in zip(products, (100, 50, 80))
            ]
        session.add_all(batches)
        session.flush()

        print("Inserting sales and expenses...")
        for batch in batches:
            for _ in range(SALES_PER_BATCH):
                product = random.choice(products)
                sold_at = now - timedelta(days=random.randint(0, SALES_DAYS_BACK))
                session.add(Sale(
                    batch_id=batch.id, product_id=product.id,
                    location_id=random.choice(locations).id,
                    quantity=random.randint(1, 5), unit_price=product.price,
                    sale_date=sold_at, created_at=sold_at,
                ))
            for expense_type in EXPENSE_TYPES:
                session.add(Expense(
                    type=expense_type, amount=round(random.uniform(20, 300), 2),
                    date=now - timedelta(days=random.randint(0, SALES_DAYS_BACK)), batch_id=batch.id,
                ))

        statuses = ["pending", "in-progress", "completed"]
        for i, title in enumerate(["Order fabric", "Design summer prints", "Photograph hoodies", "Restock market stall"]):
            session.add(Task(
                title=title, status=statuses[i % 3], priority=random.choice(["low", "medium", "high"]),
                created_by_id=users[0].id, assigned_to_id=users[i % len(users)].id,
            ))

        session.commit()
        print("Seeding finished.")
    except Exception as e:
        session.rollback()
        print(f"Seeding failed: {e}")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    populate()
