"""
Product Repository - Data Access Layer for Products

Handles all database statements for the catalog and returns Product domain
models. Order code only ever reads through find_by_id.
"""
import json
from typing import Any, Dict, List, Optional, Set

from sqlalchemy import delete, insert, select, update

from storefront.core.database import Database
from storefront.domain.product import Product, parse_image_list
from storefront.models import Product as ProductModel

products = ProductModel.__table__

PRODUCT_FIELDS = (
    'zh_title', 'en_title', 'zh_price', 'en_price', 'zh_desc', 'en_desc',
    'link', 'image', 'images', 'category',
)


class ProductRepository:
    """
    Repository for Product data access

    All SQL for products is centralized here.
    """

    def __init__(self, database: Database):
        self.database = database

    @staticmethod
    def _to_row(fields: Dict[str, Any]) -> Dict[str, Any]:
        row = {key: fields[key] for key in PRODUCT_FIELDS if key in fields}
        if isinstance(row.get('images'), list):
            row['images'] = json.dumps(row['images'])
        return row

    def find_by_id(self, product_id: int) -> Optional[Product]:
        """
        Find product by ID

        Args:
            product_id: Internal product ID

        Returns:
            Product or None if not found
        """
        with self.database.connect() as conn:
            row = conn.execute(
                select(products).where(products.c.id == product_id)
            ).mappings().first()

        if not row:
            return None
        return Product(**dict(row))

    def find_all(self, category: Optional[str] = None) -> List[Product]:
        """All products, newest first, optionally filtered by category"""
        query = select(products)
        if category:
            query = query.where(products.c.category == category)
        query = query.order_by(products.c.id.desc())

        with self.database.connect() as conn:
            rows = conn.execute(query).mappings().all()

        return [Product(**dict(row)) for row in rows]

    def create(self, fields: Dict[str, Any]) -> Product:
        """Insert a product and return it with its generated ID"""
        with self.database.transaction() as tx:
            result = tx.execute(insert(products).values(**self._to_row(fields)))
            product_id = result.inserted_primary_key[0]

        return self.find_by_id(product_id)

    def update(self, product_id: int, fields: Dict[str, Any]) -> int:
        """Overwrite the given columns. Returns rows affected."""
        with self.database.transaction() as tx:
            result = tx.execute(
                update(products)
                .where(products.c.id == product_id)
                .values(**self._to_row(fields))
            )
            return result.rowcount

    def delete(self, product_id: int) -> int:
        """
        Delete a product row

        Order items keep their product_id and price snapshot untouched.
        """
        with self.database.transaction() as tx:
            result = tx.execute(delete(products).where(products.c.id == product_id))
            return result.rowcount

    def find_image_references(self, exclude_id: Optional[int] = None) -> Set[str]:
        """Every image path referenced by products other than exclude_id"""
        query = select(products.c.images)
        if exclude_id is not None:
            query = query.where(products.c.id != exclude_id)

        with self.database.connect() as conn:
            rows = conn.execute(query).scalars().all()

        references = set()
        for images in rows:
            references.update(parse_image_list(images))
        return references
