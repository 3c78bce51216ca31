"""
Products API Endpoints
Handles the product catalog and image uploads
"""
import json
from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile
from typing import Annotated, List, Optional

from storefront.api.dependencies import get_catalog_service, http_error
from storefront.core.exceptions import StorefrontError
from storefront.domain.order import MAX_ID
from storefront.domain.product import ProductCreate, ProductUpdate
from storefront.services.product_catalog_service import ProductCatalogService

router = APIRouter()

ProductId = Annotated[int, Path(ge=1, le=MAX_ID)]


def _read_uploads(files: Optional[List[UploadFile]]):
    return [(upload.filename, upload.file.read()) for upload in (files or []) if upload.filename]


def _parse_existing_images(raw: Optional[str]) -> Optional[List[str]]:
    if raw is None:
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        return []
    if not isinstance(parsed, list):
        return []
    return [path for path in parsed if isinstance(path, str)]


@router.post("/", status_code=201)
def create_product(
    zh_title: Optional[str] = Form(None),
    en_title: Optional[str] = Form(None),
    zh_price: Optional[str] = Form(None),
    en_price: Optional[str] = Form(None),
    zh_desc: Optional[str] = Form(None),
    en_desc: Optional[str] = Form(None),
    link: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    new_images: Optional[List[UploadFile]] = File(None),
    service: ProductCatalogService = Depends(get_catalog_service)
):
    """
    Create a product

    zh_title, zh_price, zh_desc and link are required. The first uploaded
    image becomes the main image.
    """
    data = ProductCreate(
        zh_title=zh_title, en_title=en_title,
        zh_price=zh_price, en_price=en_price,
        zh_desc=zh_desc, en_desc=en_desc,
        link=link, category=category,
    )
    try:
        product = service.create_product(data, _read_uploads(new_images))
    except StorefrontError as e:
        raise http_error(e)

    return {
        "status": "success",
        "data": product.to_dict()
    }


@router.get("/")
def get_products(
    category: Optional[str] = Query(None, description="Filter by category"),
    service: ProductCatalogService = Depends(get_catalog_service)
):
    """Get all products, newest first"""
    try:
        products = service.list_products(category=category)
    except StorefrontError as e:
        raise http_error(e)

    return {
        "status": "success",
        "count": len(products),
        "data": [product.to_dict() for product in products]
    }


@router.get("/{product_id}")
def get_product(product_id: ProductId, service: ProductCatalogService = Depends(get_catalog_service)):
    """Get a single product"""
    try:
        product = service.get_product(product_id)
    except StorefrontError as e:
        raise http_error(e)

    return {
        "status": "success",
        "data": product.to_dict()
    }


@router.put("/{product_id}")
def update_product(
    product_id: ProductId,
    zh_title: Optional[str] = Form(None),
    en_title: Optional[str] = Form(None),
    zh_price: Optional[str] = Form(None),
    en_price: Optional[str] = Form(None),
    zh_desc: Optional[str] = Form(None),
    en_desc: Optional[str] = Form(None),
    link: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    existing_images: Optional[str] = Form(None, description="JSON list of image paths to keep"),
    new_images: Optional[List[UploadFile]] = File(None),
    service: ProductCatalogService = Depends(get_catalog_service)
):
    """
    Update a product

    Blank fields keep their stored value. New images are appended after
    the kept ones.
    """
    data = ProductUpdate(
        zh_title=zh_title, en_title=en_title,
        zh_price=zh_price, en_price=en_price,
        zh_desc=zh_desc, en_desc=en_desc,
        link=link, category=category,
        existing_images=_parse_existing_images(existing_images),
    )
    try:
        product = service.update_product(product_id, data, _read_uploads(new_images))
    except StorefrontError as e:
        raise http_error(e)

    return {
        "status": "success",
        "message": "Product updated",
        "data": product.to_dict()
    }


@router.delete("/{product_id}")
def delete_product(product_id: ProductId, service: ProductCatalogService = Depends(get_catalog_service)):
    """Delete a product and its images. Existing orders are not affected."""
    try:
        service.delete_product(product_id)
    except StorefrontError as e:
        raise http_error(e)

    return {
        "status": "success",
        "message": f"Product {product_id} deleted"
    }
