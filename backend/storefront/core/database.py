"""
Conexión a base de datos (SQLite o PostgreSQL)

The store is a single handle owned by the application and injected into
repositories and services. It wraps one SQLAlchemy engine; the backend is
picked from DATABASE_URL:

- sqlite:///./storefront.db           (local development, tests)
- postgresql+psycopg2://user@host/db  (production)

Writes go through a Transaction (unit of work) that always ends in commit
or rollback. Driver errors are re-raised as StorageFailure.
"""
import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from storefront.core.exceptions import StorageFailure
from storefront.models import Base

logger = logging.getLogger(__name__)

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _storage_failure(error: SQLAlchemyError) -> StorageFailure:
    """Wrap a driver error keeping the driver's own message"""
    original = getattr(error, "orig", None)
    return StorageFailure(str(original) if original is not None else str(error))


class Transaction:
    """
    A unit of work on a single connection.

    Created by Database.begin(). Exactly one of commit() or rollback()
    ends it; both release the connection back to the pool.
    """

    def __init__(self, connection: Connection):
        self.connection = connection
        self._transaction = connection.begin()

    @property
    def is_active(self) -> bool:
        return self._transaction.is_active

    def execute(self, statement):
        return self.connection.execute(statement)

    def commit(self):
        try:
            self._transaction.commit()
        finally:
            self.connection.close()

    def rollback(self):
        try:
            self._transaction.rollback()
        finally:
            self.connection.close()


class Database:
    """
    Process-wide store handle with an explicit lifecycle.

    Usage:
        db = Database(settings.DATABASE_URL).open()
        db.create_schema()
        with db.transaction() as tx:
            tx.execute(...)
        db.close()
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[Engine] = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open")
        return self._engine

    def open(self) -> "Database":
        """Create the engine and connection pool"""
        if self._engine is not None:
            return self

        if self.is_sqlite:
            kwargs = {"connect_args": {"check_same_thread": False}}
            if self.url in IN_MEMORY_URLS:
                kwargs["poolclass"] = StaticPool
            engine = create_engine(self.url, echo=self.echo, **kwargs)
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        else:
            engine = create_engine(
                self.url,
                echo=self.echo,
                pool_pre_ping=True,  # Verificar conexión antes de usar
                pool_size=10,
                max_overflow=20,
            )

        self._engine = engine
        logger.info(f"Database opened ({engine.dialect.name})")
        return self

    def close(self):
        """Dispose of the pool. Safe to call twice."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        logger.info("Database closed")

    def create_schema(self):
        """Create missing tables (products, orders, order_items)"""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise _storage_failure(e) from e

    def begin(self) -> Transaction:
        """Acquire a connection and open a transaction on it"""
        try:
            return Transaction(self.engine.connect())
        except SQLAlchemyError as e:
            raise _storage_failure(e) from e

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """
        Scoped unit of work.

        Commits when the block exits normally and rolls back on any
        exception raised inside it. SQLAlchemy errors leave the block as
        StorageFailure; anything else is re-raised unchanged.
        """
        tx = self.begin()
        try:
            yield tx
        except SQLAlchemyError as e:
            self._rollback(tx, e)
            raise _storage_failure(e) from e
        except BaseException as e:
            self._rollback(tx, e)
            raise

        try:
            tx.commit()
        except SQLAlchemyError as e:
            self._rollback(tx, e)
            raise _storage_failure(e) from e

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Scoped connection for reads"""
        try:
            with self.engine.connect() as conn:
                yield conn
        except SQLAlchemyError as e:
            raise _storage_failure(e) from e

    def ping(self) -> bool:
        with self.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True

    @staticmethod
    def _rollback(tx: Transaction, error: BaseException):
        if not tx.is_active and tx.connection.closed:
            return
        logger.warning(f"Rolling back transaction after error: {error}")
        try:
            tx.rollback()
        except Exception as rollback_error:
            # The caller must still see the original error
            logger.error(
                f"Rollback failed: {rollback_error} (original error: {error})"
            )
