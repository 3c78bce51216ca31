"""
Order Domain Models

Represents order-related entities of the storefront.
These are the single source of truth for order data structure.
"""
from enum import Enum
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime, timezone
from decimal import Decimal


UNSPECIFIED = "unspecified"

# Largest value an Integer column holds on every supported backend
MAX_ID = 2**31 - 1


class OrderStatus(str, Enum):
    """Recognized order statuses. Any status may follow any other."""

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> List[str]:
        return [status.value for status in cls]


class CustomerInfo(BaseModel):
    """
    Customer snapshot submitted at checkout

    Fields:
        name: Customer name (required)
        address: Delivery address (required)
        email: Contact email
        phone: Contact phone
        payment_method: Defaults to "unspecified"
        size: Size/variant chosen by the customer, defaults to "unspecified"
    """

    name: str = Field(..., description="Customer name")
    address: str = Field(..., description="Delivery address")
    email: Optional[str] = Field(None, description="Customer email")
    phone: Optional[str] = Field(None, description="Customer phone")
    payment_method: str = Field(UNSPECIFIED, description="Payment method")
    size: str = Field(UNSPECIFIED, description="Size or variant")

    @field_validator("name", "address")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("payment_method", "size", mode="before")
    @classmethod
    def default_when_empty(cls, value):
        return value or UNSPECIFIED


class OrderItemInput(BaseModel):
    """One requested line: which product, how many, and optionally at what price"""

    product_id: int = Field(..., description="Product catalog ID", ge=1, le=MAX_ID)
    quantity: int = Field(..., description="Quantity ordered", ge=1, le=MAX_ID)
    # Stored as DECIMAL(12, 2)
    price: Optional[Decimal] = Field(
        None, description="Unit price override", ge=0, max_digits=12, decimal_places=2
    )


class OrderCreate(BaseModel):
    """Schema for placing a new order"""

    customer: CustomerInfo
    items: List[OrderItemInput]


class OrderStatusUpdate(BaseModel):
    """Schema for changing an order status"""

    status: Optional[str] = None


class OrderItem(BaseModel):
    """
    Order Item domain model - represents a line item in an order

    Fields:
        id: Internal order item ID
        order_id: Parent order ID
        product_id: Product reference (may point to a deleted product)
        quantity: Number of units ordered
        price: Unit price captured when the order was placed
    """

    id: int = Field(..., description="Order item ID")
    order_id: int = Field(..., description="Parent order ID")
    product_id: int = Field(..., description="Product catalog ID")
    quantity: int = Field(..., description="Quantity ordered", ge=1)
    price: Decimal = Field(Decimal('0'), description="Unit price at order time", ge=0)

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        """Convert to dictionary with Decimal to float conversion"""
        data = self.model_dump()
        data['price'] = float(data['price'])
        data['subtotal'] = float(self.subtotal)
        return data


class Order(BaseModel):
    """
    Order domain model - represents a customer order

    Fields:
        id: Internal order ID (primary key)

        # Customer snapshot
        customer_name, customer_address, customer_email, customer_phone
        payment_method: How the customer pays
        size: Size/variant chosen by the customer

        # Status tracking
        status: One of OrderStatus

        # Dates
        created_at: When the order was placed

        # Order items (only filled by OrderService.get_order)
        items: List of order items
    """

    id: int = Field(..., description="Internal order ID")

    customer_name: str = Field(..., description="Customer name")
    customer_address: str = Field(..., description="Customer address")
    customer_email: Optional[str] = Field(None, description="Customer email")
    customer_phone: Optional[str] = Field(None, description="Customer phone")
    payment_method: str = Field(UNSPECIFIED, description="Payment method")
    size: str = Field(UNSPECIFIED, description="Size or variant")

    status: OrderStatus = Field(OrderStatus.PENDING, description="Order status")
    created_at: datetime = Field(..., description="Creation timestamp")

    items: List[OrderItem] = Field(default_factory=list, description="Order items")

    model_config = ConfigDict(from_attributes=True)

    @field_validator("created_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive timestamps; they were written in UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def item_count(self) -> int:
        """Number of lines in the order"""
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        """Total quantity of all items"""
        return sum(item.quantity for item in self.items)

    @property
    def total(self) -> Decimal:
        return sum((item.subtotal for item in self.items), Decimal('0'))

    def to_dict(self, include_items: bool = True) -> dict:
        """
        Convert to dictionary with computed fields

        Returns dict with all fields plus computed properties
        """
        data = self.model_dump(exclude={'items'})
        data['status'] = self.status.value
        data['created_at'] = self.created_at.isoformat()

        if include_items:
            data['items'] = [item.to_dict() for item in self.items]
            data['item_count'] = self.item_count
            data['total_quantity'] = self.total_quantity
            data['total'] = float(self.total)

        return data
