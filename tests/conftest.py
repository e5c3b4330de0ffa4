"""Shared fixtures: a throwaway SQLite database, users, tokens and a fake AI gateway."""
import os
import tempfile
from datetime import datetime, timedelta

# Must happen before config/database are imported
_db_dir = tempfile.mkdtemp(prefix="brandops-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["APP_URL"] = "http://testserver"

import pytest
from fastapi.testclient import TestClient

import models  # noqa: F401
from database import Base, SessionLocal, engine
from models.users import User
from models.product import Product
from models.batch import Batch, BatchProduct
from models.expense import Expense
from models.sale import Sale, SalesLocation
from models.task import Task
from services import events
from utils.ai_gateway import GatewayResult, get_ai_gateway
from utils.tokenJWT import create_access_token


class FakeGateway:
    """Stands in for AIGatewayClient; records every prompt it receives."""

    def __init__(self, reply="Here are your insights.", fail=False):
        self.reply = reply
        self.fail = fail
        self.prompts = []

    async def ask(self, prompt):
        self.prompts.append(prompt)
        if self.fail:
            return GatewayResult.failure("timeout")
        return GatewayResult.success(self.reply)


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    events.clear_subscribers()
    yield
    events.clear_subscribers()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def _make_user(db, email, name):
    user = User(email=email, name=name, role="user")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return _make_user(db, "owner@brandops.com", "Owner")


@pytest.fixture
def other_user(db):
    return _make_user(db, "intruder@brandops.com", "Intruder")


def token_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest.fixture
def auth_headers(user):
    return token_headers(user)


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def client(fake_gateway):
    from main import app

    app.dependency_overrides[get_ai_gateway] = lambda: fake_gateway
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def store(db):
    """Small factory for record-store rows used by analytics and batch tests."""

    class Store:
        def __init__(self, session):
            self.db = session
            self._location = None
            self._batch = None

        def product(self, name="Cap", cost=2.0, price=5.0):
            product = Product(name=name, cost=cost, price=price)
            self.db.add(product)
            self.db.commit()
            return product

        def location(self, name="Downtown Store"):
            location = SalesLocation(name=name)
            self.db.add(location)
            self.db.commit()
            return location

        def batch(self, name="Spring Drop", status="in-progress"):
            batch = Batch(name=name, status=status)
            self.db.add(batch)
            self.db.commit()
            return batch

        def line(self, batch, product, quantity, cost):
            line = BatchProduct(batch_id=batch.id, product_id=product.id, quantity=quantity, cost=cost)
            self.db.add(line)
            self.db.commit()
            return line

        def sale(self, product, quantity, unit_price, batch=None, location=None, days_ago=0):
            if batch is None:
                self._batch = self._batch or self.batch()
                batch = self._batch
            if location is None:
                self._location = self._location or self.location()
                location = self._location
            when = datetime.utcnow() - timedelta(days=days_ago)
            sale = Sale(
                batch_id=batch.id, product_id=product.id, location_id=location.id,
                quantity=quantity, unit_price=unit_price, sale_date=when, created_at=when,
            )
            self.db.add(sale)
            self.db.commit()
            return sale

        def expense(self, type, amount, batch=None, days_ago=0):
            expense = Expense(
                type=type, amount=amount, batch_id=batch.id if batch else None,
                date=datetime.utcnow() - timedelta(days=days_ago),
            )
            self.db.add(expense)
            self.db.commit()
            return expense

        def task(self, created_by, status="pending", priority="medium", title="Do something"):
            task = Task(title=title, status=status, priority=priority, created_by_id=created_by.id)
            self.db.add(task)
            self.db.commit()
            return task

    return Store(db)
