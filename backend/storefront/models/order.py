"""
Modelos relacionados con órdenes/pedidos
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, DECIMAL, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from .base import Base


class Order(Base):
    """
    Pedido de un cliente. Los datos del cliente son una copia tomada al momento de la compra.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Cliente
    customer_name = Column(Text, nullable=False)
    customer_address = Column(Text, nullable=False)
    customer_email = Column(Text)
    customer_phone = Column(Text)
    payment_method = Column(String(50), nullable=False, default="unspecified")
    size = Column(String(50), nullable=False, default="unspecified")

    # Estado
    status = Column(String(50), nullable=False, default="pending", index=True)

    # Fechas
    created_at = Column(DateTime(timezone=True), nullable=False)

    items = relationship("OrderItem", back_populates="order")

    def __repr__(self):
        return f"<Order(id={self.id}, status='{self.status}')>"


class OrderItem(Base):
    """
    Línea de un pedido

    product_id no es llave foránea: borrar un producto no debe tocar los
    items históricos.
    """
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False)

    quantity = Column(Integer, nullable=False)
    price = Column(DECIMAL(12, 2), nullable=False, default=0)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem(order_id={self.order_id}, product_id={self.product_id}, quantity={self.quantity})>"
