"""
Order Service
Places, updates and deletes customer orders

Every multi-row write runs inside one Database transaction: an order is
never visible without its items, and items never outlive their order.
"""
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from storefront.core.database import Database
from storefront.core.exceptions import InvalidInput, NotFound, describe_errors
from storefront.domain.order import CustomerInfo, Order, OrderItemInput, OrderStatus
from storefront.repositories.order_repository import OrderRepository

logger = logging.getLogger(__name__)

CustomerLike = Union[CustomerInfo, Mapping[str, Any]]
ItemLike = Union[OrderItemInput, Mapping[str, Any]]


class OrderService:
    """
    Service for the order lifecycle

    Handles:
    - Placing an order together with its items (atomic)
    - Status transitions
    - Deleting an order and its items (atomic)
    - Reading orders back
    """

    def __init__(self, database: Database, repository: Optional[OrderRepository] = None):
        self.database = database
        self.repository = repository or OrderRepository(database)

    @staticmethod
    def _parse_customer(customer: Optional[CustomerLike]) -> CustomerInfo:
        if customer is None:
            raise InvalidInput("customer is required")
        if isinstance(customer, CustomerInfo):
            return customer
        try:
            return CustomerInfo.model_validate(customer)
        except ValidationError as e:
            raise InvalidInput(f"invalid customer: {describe_errors(e.errors())}") from e

    @staticmethod
    def _parse_items(items: Optional[Sequence[ItemLike]]) -> List[OrderItemInput]:
        if not items:
            raise InvalidInput("order must contain at least one item")
        if not isinstance(items, (list, tuple)):
            raise InvalidInput("items must be a list")
        parsed = []
        for index, item in enumerate(items):
            if isinstance(item, OrderItemInput):
                parsed.append(item)
                continue
            try:
                parsed.append(OrderItemInput.model_validate(item))
            except ValidationError as e:
                raise InvalidInput(f"invalid item {index}: {describe_errors(e.errors())}") from e
        return parsed

    def place_order(
        self,
        customer: Optional[CustomerLike],
        items: Optional[Sequence[ItemLike]]
    ) -> int:
        """
        Create an order with its items in one transaction

        Item prices are taken from the request (0 when omitted); the
        catalog price is not consulted.

        Args:
            customer: CustomerInfo or a mapping with at least name and address
            items: Non-empty sequence of OrderItemInput or mappings

        Returns:
            The new order ID

        Raises:
            InvalidInput: before any store access
            StorageFailure: a statement failed; nothing was persisted
        """
        customer_info = self._parse_customer(customer)
        order_items = self._parse_items(items)

        with self.database.transaction() as tx:
            order_id = self.repository.insert_order(tx, {
                'customer_name': customer_info.name,
                'customer_address': customer_info.address,
                'customer_email': customer_info.email,
                'customer_phone': customer_info.phone,
                'payment_method': customer_info.payment_method,
                'size': customer_info.size,
                'status': OrderStatus.PENDING.value,
                'created_at': datetime.now(timezone.utc),
            })

            for item in order_items:
                self.repository.insert_order_item(
                    tx,
                    order_id,
                    item.product_id,
                    item.quantity,
                    item.price if item.price is not None else Decimal('0'),
                )

        logger.info(f"Order {order_id} placed with {len(order_items)} item(s)")
        return order_id

    def update_status(self, order_id: int, status: Optional[str]) -> int:
        """
        Change the status of an order

        Returns:
            Number of orders updated (always 1)

        Raises:
            InvalidInput: status missing or not a recognized value
            NotFound: no such order
        """
        if not status:
            raise InvalidInput("status is required")
        if isinstance(status, OrderStatus):
            status = status.value
        if status not in OrderStatus.values():
            raise InvalidInput(
                f"unknown status '{status}', expected one of: {', '.join(OrderStatus.values())}"
            )

        with self.database.transaction() as tx:
            updated = self.repository.update_status(tx, order_id, status)

        if updated == 0:
            raise NotFound(f"order {order_id} not found")

        logger.info(f"Order {order_id} status set to {status}")
        return updated

    def delete_order(self, order_id: int) -> None:
        """
        Delete an order and all its items together

        Raises:
            NotFound: no such order (nothing is changed)
        """
        with self.database.transaction() as tx:
            items_deleted = self.repository.delete_items(tx, order_id)
            if self.repository.delete_order(tx, order_id) == 0:
                raise NotFound(f"order {order_id} not found")

        logger.info(f"Order {order_id} deleted with {items_deleted} item(s)")

    def get_order(self, order_id: int) -> Order:
        """Order with its items, in insertion order"""
        order = self.repository.find_by_id(order_id)
        if order is None:
            raise NotFound(f"order {order_id} not found")
        items = self.repository.list_items(order_id)
        return order.model_copy(update={'items': items})

    def list_orders(self) -> List[Order]:
        """All orders without their items"""
        return self.repository.find_all()
