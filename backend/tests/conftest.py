"""
Pytest fixtures and configuration for Storefront Backend tests

This file provides shared fixtures that can be used across all test modules.
Every test gets its own SQLite database file under pytest's tmp_path.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from storefront.core.config import Settings
from storefront.core.database import Database
from storefront.main import create_app
from storefront.models import OrderItem as OrderItemModel
from storefront.repositories.order_repository import OrderRepository
from storefront.repositories.product_repository import ProductRepository
from storefront.services.image_storage import ImageStorage
from storefront.services.order_service import OrderService
from storefront.services.product_catalog_service import ProductCatalogService


@pytest.fixture
def database_url(tmp_path):
    """SQLite database file private to the test"""
    return f"sqlite:///{tmp_path / 'storefront.db'}"


@pytest.fixture
def database(database_url):
    """
    Provides an open database with the schema created

    Scope: function (fresh database per test)
    Automatically closed after the test
    """
    db = Database(database_url).open()
    db.create_schema()
    yield db
    db.close()


@pytest.fixture
def stored_item_count(database):
    """Number of rows in order_items, optionally for one order"""
    order_items = OrderItemModel.__table__

    def count(order_id=None):
        query = select(func.count()).select_from(order_items)
        if order_id is not None:
            query = query.where(order_items.c.order_id == order_id)
        with database.connect() as conn:
            return conn.execute(query).scalar_one()

    return count


@pytest.fixture
def order_repository(database):
    return OrderRepository(database)


@pytest.fixture
def product_repository(database):
    return ProductRepository(database)


@pytest.fixture
def order_service(database):
    return OrderService(database)


@pytest.fixture
def image_storage(tmp_path):
    return ImageStorage(str(tmp_path / "uploads"))


@pytest.fixture
def catalog_service(product_repository, image_storage):
    return ProductCatalogService(product_repository, image_storage)


@pytest.fixture
def test_settings(tmp_path, database_url):
    return Settings(
        DATABASE_URL=database_url,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def client(test_settings):
    """
    FastAPI TestClient running the app lifespan (database open/close)
    """
    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sample_customer():
    """
    Provides sample customer data for tests
    """
    return {
        "name": "Lin Mei",
        "address": "No. 7, Section 2, Zhongshan Rd, Taipei",
        "email": "lin.mei@example.com",
        "phone": "0912-345-678",
        "payment_method": "credit_card",
        "size": "L",
    }


@pytest.fixture
def sample_items():
    """
    Provides sample order items for tests
    """
    return [
        {"product_id": 1, "quantity": 2, "price": "1200.00"},
        {"product_id": 2, "quantity": 1, "price": "350.50"},
        {"product_id": 3, "quantity": 5},
    ]


@pytest.fixture
def sample_product_data():
    """
    Provides sample product data for tests
    """
    return {
        "zh_title": "檜木椅",
        "en_title": "Cypress Chair",
        "zh_price": "NT$3200",
        "en_price": "US$100",
        "zh_desc": "手工檜木椅",
        "en_desc": "Handmade cypress chair",
        "link": "https://example.com/products/cypress-chair",
    }
