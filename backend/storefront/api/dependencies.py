"""
FastAPI dependencies and error translation shared by the routers
"""
from fastapi import HTTPException, Request

from storefront.core.database import Database
from storefront.core.exceptions import InvalidInput, NotFound, StorefrontError
from storefront.repositories.product_repository import ProductRepository
from storefront.services.image_storage import ImageStorage
from storefront.services.order_service import OrderService
from storefront.services.product_catalog_service import ProductCatalogService

STATUS_CODES = {
    InvalidInput: 400,
    NotFound: 404,
}


def get_database(request: Request) -> Database:
    """The store handle opened by the application lifespan"""
    return request.app.state.database


def get_order_service(request: Request) -> OrderService:
    return OrderService(get_database(request))


def get_catalog_service(request: Request) -> ProductCatalogService:
    settings = request.app.state.settings
    return ProductCatalogService(
        ProductRepository(get_database(request)),
        ImageStorage(settings.UPLOAD_DIR),
        default_category=settings.DEFAULT_CATEGORY,
    )


def http_error(error: StorefrontError) -> HTTPException:
    """Map a service error to an HTTP error with a structured body"""
    status_code = STATUS_CODES.get(type(error), 500)
    return HTTPException(status_code=status_code, detail=error.to_dict())
