"""
Tests for the Database handle and its unit of work

SQLite runs always. The same checks run against PostgreSQL when
POSTGRES_TEST_URL points at a disposable database.
"""
import os
import pytest
from datetime import datetime, timezone
from dotenv import load_dotenv
from sqlalchemy import insert, select, text
from sqlalchemy.exc import OperationalError

from storefront.core.database import Database, Transaction
from storefront.core.exceptions import NotFound, StorageFailure
from storefront.models import Order as OrderModel, OrderItem as OrderItemModel

load_dotenv()

orders = OrderModel.__table__
order_items = OrderItemModel.__table__


def order_row(**overrides):
    row = {
        "customer_name": "Lin Mei",
        "customer_address": "Taipei",
        "payment_method": "unspecified",
        "size": "unspecified",
        "status": "pending",
        "created_at": datetime.now(timezone.utc),
    }
    row.update(overrides)
    return row


def count(database, table):
    with database.connect() as conn:
        return len(conn.execute(select(table.c.id)).all())


class TestLifecycle:

    def test_engine_requires_open(self, database_url):
        db = Database(database_url)

        with pytest.raises(RuntimeError, match="not open"):
            db.engine

    def test_open_is_idempotent_and_close_twice_is_safe(self, database_url):
        db = Database(database_url)

        assert db.open() is db
        engine = db.engine
        assert db.open().engine is engine

        db.close()
        db.close()
        with pytest.raises(RuntimeError):
            db.engine

    def test_in_memory_database_shares_one_connection(self):
        db = Database("sqlite://").open()
        db.create_schema()

        with db.transaction() as tx:
            tx.execute(insert(orders).values(**order_row()))

        assert count(db, orders) == 1
        db.close()

    def test_ping(self, database):
        assert database.ping() is True


class TestTransaction:

    def test_commit_on_normal_exit(self, database):
        with database.transaction() as tx:
            assert isinstance(tx, Transaction)
            tx.execute(insert(orders).values(**order_row()))

        assert count(database, orders) == 1

    def test_rollback_on_store_error_raises_storage_failure(self, database):
        with pytest.raises(StorageFailure) as exc_info:
            with database.transaction() as tx:
                tx.execute(insert(orders).values(**order_row()))
                tx.execute(text("INSERT INTO no_such_table VALUES (1)"))

        assert "no_such_table" in exc_info.value.message
        assert exc_info.value.__cause__ is not None
        assert count(database, orders) == 0

    def test_other_errors_roll_back_and_propagate_unchanged(self, database):
        with pytest.raises(NotFound):
            with database.transaction() as tx:
                tx.execute(insert(orders).values(**order_row()))
                raise NotFound("order 1 not found")

        assert count(database, orders) == 0

    def test_manual_begin_commit(self, database):
        tx = database.begin()
        tx.execute(insert(orders).values(**order_row()))
        tx.commit()

        assert tx.connection.closed
        assert count(database, orders) == 1

    def test_manual_begin_rollback(self, database):
        tx = database.begin()
        tx.execute(insert(orders).values(**order_row()))
        tx.rollback()

        assert tx.connection.closed
        assert count(database, orders) == 0

    def test_commit_failure_is_storage_failure(self, database, monkeypatch):
        def failing_commit(self):
            self.connection.close()
            raise OperationalError("COMMIT", {}, Exception("database is locked"))

        monkeypatch.setattr(Transaction, "commit", failing_commit)

        with pytest.raises(StorageFailure, match="database is locked"):
            with database.transaction() as tx:
                tx.execute(insert(orders).values(**order_row()))

        assert count(database, orders) == 0


class TestSchema:

    def test_item_requires_existing_order(self, database):
        """Foreign keys are enforced on SQLite connections"""
        with pytest.raises(StorageFailure, match="FOREIGN KEY"):
            with database.transaction() as tx:
                tx.execute(insert(order_items).values(order_id=999, product_id=1, quantity=1, price=0))

    def test_order_with_items_cannot_be_deleted_first(self, database):
        with database.transaction() as tx:
            order_id = tx.execute(insert(orders).values(**order_row())).inserted_primary_key[0]
            tx.execute(insert(order_items).values(order_id=order_id, product_id=1, quantity=1, price=0))

        with pytest.raises(StorageFailure):
            with database.transaction() as tx:
                tx.execute(orders.delete().where(orders.c.id == order_id))

        assert count(database, orders) == 1

    def test_quantity_must_be_positive(self, database):
        with database.transaction() as tx:
            order_id = tx.execute(insert(orders).values(**order_row())).inserted_primary_key[0]

        with pytest.raises(StorageFailure):
            with database.transaction() as tx:
                tx.execute(insert(order_items).values(order_id=order_id, product_id=1, quantity=0, price=0))

    def test_create_schema_twice(self, database):
        database.create_schema()


@pytest.fixture
def postgres_database():
    url = os.getenv("POSTGRES_TEST_URL")
    if not url:
        pytest.skip("POSTGRES_TEST_URL not configured")
    db = Database(url).open()
    db.create_schema()
    yield db
    with db.transaction() as tx:
        tx.execute(order_items.delete())
        tx.execute(orders.delete())
    db.close()


class TestPostgres:

    def test_transaction_roundtrip(self, postgres_database):
        with pytest.raises(StorageFailure):
            with postgres_database.transaction() as tx:
                tx.execute(insert(orders).values(**order_row(customer_name="rollback-check")))
                tx.execute(text("SELECT * FROM no_such_table"))

        with postgres_database.connect() as conn:
            rows = conn.execute(
                select(orders.c.id).where(orders.c.customer_name == "rollback-check")
            ).all()
        assert rows == []
