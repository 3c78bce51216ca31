"""
Order Repository - Data Access Layer for Orders

Handles all database statements for orders and order items and returns
Order domain models. Write methods take the caller's Transaction so that
several of them commit or roll back together; only OrderService calls them.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, insert, select, update

from storefront.core.database import Database, Transaction
from storefront.domain.order import Order, OrderItem
from storefront.models import Order as OrderModel, OrderItem as OrderItemModel

orders = OrderModel.__table__
order_items = OrderItemModel.__table__

ORDER_FIELDS = (
    'customer_name', 'customer_address', 'customer_email', 'customer_phone',
    'payment_method', 'size', 'status', 'created_at',
)


class OrderRepository:
    """
    Repository for Order data access

    All statements touching orders and order_items are centralized here.
    """

    def __init__(self, database: Database):
        self.database = database

    # ------------------------------------------------------------------
    # Writes (transaction-scoped)
    # ------------------------------------------------------------------

    def insert_order(self, tx: Transaction, fields: Dict[str, Any]) -> int:
        """
        Insert an order row

        Args:
            tx: Open transaction
            fields: Column values, see ORDER_FIELDS

        Returns:
            The generated order ID
        """
        values = {key: fields.get(key) for key in ORDER_FIELDS}
        result = tx.execute(insert(orders).values(**values))
        return result.inserted_primary_key[0]

    def insert_order_item(
        self,
        tx: Transaction,
        order_id: int,
        product_id: int,
        quantity: int,
        price: Decimal
    ) -> int:
        """Insert one line of an order and return its ID"""
        result = tx.execute(
            insert(order_items).values(
                order_id=order_id,
                product_id=product_id,
                quantity=quantity,
                price=price,
            )
        )
        return result.inserted_primary_key[0]

    def update_status(self, tx: Transaction, order_id: int, status: str) -> int:
        """Set the order status. Returns the number of rows affected."""
        result = tx.execute(
            update(orders).where(orders.c.id == order_id).values(status=status)
        )
        return result.rowcount

    def delete_items(self, tx: Transaction, order_id: int) -> int:
        """Delete every item owned by the order. Returns rows affected."""
        result = tx.execute(delete(order_items).where(order_items.c.order_id == order_id))
        return result.rowcount

    def delete_order(self, tx: Transaction, order_id: int) -> int:
        """Delete the order row. Its items must already be gone."""
        result = tx.execute(delete(orders).where(orders.c.id == order_id))
        return result.rowcount

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_id(self, order_id: int) -> Optional[Order]:
        """
        Find order by ID, without items

        Returns:
            Order or None if not found
        """
        with self.database.connect() as conn:
            row = conn.execute(
                select(orders).where(orders.c.id == order_id)
            ).mappings().first()

        if not row:
            return None
        return Order(**dict(row))

    def list_items(self, order_id: int) -> List[OrderItem]:
        """Items of an order in insertion order"""
        with self.database.connect() as conn:
            rows = conn.execute(
                select(order_items)
                .where(order_items.c.order_id == order_id)
                .order_by(order_items.c.id)
            ).mappings().all()

        return [OrderItem(**dict(row)) for row in rows]

    def find_all(self) -> List[Order]:
        """All orders, newest first, without items"""
        with self.database.connect() as conn:
            rows = conn.execute(
                select(orders).order_by(orders.c.id.desc())
            ).mappings().all()

        return [Order(**dict(row)) for row in rows]
