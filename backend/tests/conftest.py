import os

# Point the module-level engine at SQLite before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import catalog_api.db.models  # noqa: F401
from catalog_api.api.dependencies.db import get_session
from catalog_api.db.base import Base
from catalog_api.db.models.product import Product
from catalog_api.db.session import build_engine
from catalog_api.main import app


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_session():
        db = session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def add_product(db_session):
    """Insert a product row directly, bypassing the API."""

    def _add(**overrides) -> Product:
        values = {
            "name": "Widget",
            "description": "A useful widget",
            "price": Decimal("9.99"),
            "stock_quantity": 5,
            "category": "Tools",
            "manufacturer": None,
            "is_active": True,
            "is_deleted": False,
        }
        values.update(overrides)
        if not isinstance(values["price"], Decimal):
            values["price"] = Decimal(str(values["price"]))
        product = Product(**values)
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product

    return _add
