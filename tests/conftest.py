import os
from decimal import Decimal

# settings czyta env przy imporcie - ustawiamy zanim zaladujemy foodexpress
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_TASK_ALWAYS_EAGER", "true")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from foodexpress.data.database import Base, get_db
import foodexpress.data.models  # noqa: F401
from foodexpress.api import deps
from foodexpress.api.routers import carts, orders, health
from foodexpress.domain.errors import ItemNotFound
from foodexpress.domain.pricing import PricingPolicy
from foodexpress.services.catalog_client import CatalogItem, CatalogReader

RESTAURANT_ID = 1
OTHER_RESTAURANT_ID = 2


def _enable_sqlite_fk(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class FakeCatalog(CatalogReader):
    def __init__(self, items=()):
        self.items = {item.id: item for item in items}
        self.calls = []

    def put(self, item_id, name, price, available=True, restaurant_id=RESTAURANT_ID):
        self.items[item_id] = CatalogItem(
            id=item_id,
            name=name,
            price=Decimal(str(price)),
            available=available,
            restaurant_id=restaurant_id,
        )

    def resolve_item(self, item_id):
        self.calls.append(item_id)
        if item_id not in self.items:
            raise ItemNotFound(item_id)
        return self.items[item_id]


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def order_placed(self, user_id, order_id, order_number):
        self.sent.append(("placed", user_id, order_id, order_number))

    def status_changed(self, user_id, order_id, order_number, status):
        self.sent.append((status, user_id, order_id, order_number))


@pytest.fixture()
def engine(tmp_path):
    # plik zamiast :memory: - testy wspolbieznosci potrzebuja osobnych polaczen
    engine = create_engine(
        f"sqlite:///{tmp_path / 'orders.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    event.listen(engine, "connect", _enable_sqlite_fk)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def catalog():
    catalog = FakeCatalog()
    catalog.put(1, "Chips Mayai", "5000.00")
    catalog.put(2, "Chai Maziwa", "3000.00")
    catalog.put(3, "Fish Fry", "9000.00", available=False)
    catalog.put(4, "Nyama Choma", "12000.00", restaurant_id=OTHER_RESTAURANT_ID)
    return catalog


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def pricing():
    return PricingPolicy()


@pytest.fixture()
def client(session_factory, catalog, notifier, pricing):
    app = FastAPI()
    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(orders.router)

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[deps.get_catalog] = lambda: catalog
    app.dependency_overrides[deps.get_pricing] = lambda: pricing
    app.dependency_overrides[deps.get_notifier] = lambda: notifier
    return TestClient(app)
