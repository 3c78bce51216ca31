"""
Tabla de productos del catálogo
"""
from sqlalchemy import Column, Integer, Text

from .base import Base


class Product(Base):
    """
    Catálogo de productos

    Los precios se guardan como texto, tal como se ingresan en el formulario.
    `images` guarda un arreglo JSON de rutas /uploads/; `image` es su primer elemento.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)

    zh_title = Column(Text, nullable=False)
    en_title = Column(Text)
    zh_price = Column(Text, nullable=False)
    en_price = Column(Text)
    zh_desc = Column(Text, nullable=False)
    en_desc = Column(Text)
    link = Column(Text, nullable=False)

    image = Column(Text)
    images = Column(Text, nullable=False, default="[]")

    category = Column(Text, nullable=False, default="wood", server_default="wood")

    def __repr__(self):
        return f"<Product(id={self.id}, zh_title='{self.zh_title}')>"
