"""
Product Catalog Service
Catalog maintenance: products and their uploaded images

Orders only hold a weak reference (product_id) to products, so deleting a
product never touches order items.
"""
import logging
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from storefront.core.exceptions import InvalidInput, NotFound
from storefront.domain.product import Product, ProductCreate, ProductUpdate
from storefront.repositories.product_repository import ProductRepository
from storefront.services.image_storage import ImageStorage

logger = logging.getLogger(__name__)

# (original file name, content)
Upload = Tuple[str, bytes]

REQUIRED_FIELDS = ('zh_title', 'zh_price', 'zh_desc', 'link')
TEXT_FIELDS = ('zh_title', 'en_title', 'zh_price', 'en_price', 'zh_desc', 'en_desc', 'link')


class ProductCatalogService:
    """
    Service for the product catalog

    Handles:
    - Product creation with image uploads
    - Partial updates (blank fields keep the stored value)
    - Deletion, releasing images no other product uses
    """

    def __init__(
        self,
        repository: ProductRepository,
        storage: ImageStorage,
        default_category: str = "wood"
    ):
        self.repository = repository
        self.storage = storage
        self.default_category = default_category

    def get_product(self, product_id: int) -> Product:
        """Catalog lookup used by every reader. Raises NotFound."""
        product = self.repository.find_by_id(product_id)
        if product is None:
            raise NotFound(f"product {product_id} not found")
        return product

    def list_products(self, category: Optional[str] = None) -> List[Product]:
        return self.repository.find_all(category=category)

    def _store_uploads(self, uploads: Optional[Sequence[Upload]]) -> List[str]:
        return [self.storage.save(filename, data) for filename, data in (uploads or [])]

    def _discard(self, references: Sequence[str]):
        for reference in references:
            self.storage.delete(reference)

    def create_product(
        self,
        data: Union[ProductCreate, Mapping[str, Any]],
        uploads: Optional[Sequence[Upload]] = None
    ) -> Product:
        """
        Create a product; uploaded images are stored first

        Raises:
            InvalidInput: a required field is missing
        """
        if not isinstance(data, ProductCreate):
            data = ProductCreate(**data)

        missing = [field for field in REQUIRED_FIELDS if not getattr(data, field)]
        if missing:
            raise InvalidInput(f"required fields missing: {', '.join(missing)}")

        images = self._store_uploads(uploads)
        fields = {field: getattr(data, field) for field in TEXT_FIELDS}
        fields.update({
            'category': data.category or self.default_category,
            'images': images,
            'image': images[0] if images else None,
        })

        try:
            product = self.repository.create(fields)
        except Exception:
            # The row was never written, so nothing references the files
            self._discard(images)
            raise

        logger.info(f"Product {product.id} created with {len(images)} image(s)")
        return product

    def update_product(
        self,
        product_id: int,
        data: Union[ProductUpdate, Mapping[str, Any]],
        uploads: Optional[Sequence[Upload]] = None
    ) -> Product:
        """
        Update a product

        existing_images lists the stored images to keep (only /uploads/
        paths are accepted); new uploads are appended after them. When
        existing_images is not given the stored list is kept.
        """
        if not isinstance(data, ProductUpdate):
            data = ProductUpdate(**data)

        product = self.get_product(product_id)

        if data.existing_images is None:
            kept = list(product.images)
        else:
            kept = [path for path in data.existing_images if self.storage.is_reference(path)]

        added = self._store_uploads(uploads)
        images = kept + added

        fields = {
            field: getattr(data, field) or getattr(product, field)
            for field in TEXT_FIELDS
        }
        fields.update({
            'category': data.category or product.category,
            'images': images,
            'image': images[0] if images else None,
        })

        try:
            self.repository.update(product_id, fields)
        except Exception:
            self._discard(added)
            raise

        dropped = [path for path in product.images if path not in images]
        self._release(product_id, dropped)

        logger.info(f"Product {product_id} updated")
        return self.get_product(product_id)

    def delete_product(self, product_id: int) -> None:
        """
        Delete a product and release its exclusively-owned images

        Raises:
            NotFound: no such product
        """
        product = self.get_product(product_id)

        if self.repository.delete(product_id) == 0:
            raise NotFound(f"product {product_id} not found")

        self._release(product_id, product.images)
        logger.info(f"Product {product_id} deleted")

    def _release(self, product_id: int, references: Sequence[str]):
        """Delete image files unless another product still references them"""
        if not references:
            return
        shared = self.repository.find_image_references(exclude_id=product_id)
        for reference in references:
            if reference in shared:
                logger.debug(f"Keeping shared image {reference}")
                continue
            self.storage.delete(reference)
