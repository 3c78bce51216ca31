"""
Modelos de base de datos
"""
from .base import Base
from .product import Product
from .order import Order, OrderItem

__all__ = [
    "Base",
    "Product",
    "Order",
    "OrderItem",
]
