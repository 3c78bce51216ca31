"""
Service Layer - Business Logic
"""
from storefront.services.order_service import OrderService
from storefront.services.product_catalog_service import ProductCatalogService
from storefront.services.image_storage import ImageStorage

__all__ = [
    'OrderService',
    'ProductCatalogService',
    'ImageStorage',
]
