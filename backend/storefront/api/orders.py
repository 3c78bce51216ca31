"""
Orders API Endpoints
Handles order placement, status changes and deletion
"""
from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel
from typing import Annotated, Any, Optional

from storefront.api.dependencies import get_order_service, http_error
from storefront.core.exceptions import StorefrontError
from storefront.domain.order import MAX_ID, OrderStatusUpdate
from storefront.services.order_service import OrderService

router = APIRouter()

OrderId = Annotated[int, Path(ge=1, le=MAX_ID)]


# Request models
# Validation of the contents happens in OrderService so every rejection
# comes back as the same structured invalid_input error.
class PlaceOrderRequest(BaseModel):
    customer: Optional[Any] = None
    items: Optional[Any] = None


@router.post("/", status_code=201)
def place_order(
    payload: PlaceOrderRequest,
    service: OrderService = Depends(get_order_service)
):
    """
    Place an order with its items

    All items are stored together with the order, or nothing is stored.
    """
    try:
        order_id = service.place_order(payload.customer, payload.items)
    except StorefrontError as e:
        raise http_error(e)

    return {
        "status": "success",
        "order_id": order_id
    }


@router.get("/")
def get_orders(service: OrderService = Depends(get_order_service)):
    """
    Get all orders

    Items are not included, fetch a single order to get them
    """
    try:
        orders = service.list_orders()
    except StorefrontError as e:
        raise http_error(e)

    return {
        "status": "success",
        "count": len(orders),
        "data": [order.to_dict(include_items=False) for order in orders]
    }


@router.get("/{order_id}")
def get_order(order_id: OrderId, service: OrderService = Depends(get_order_service)):
    """Get a single order with its items"""
    try:
        order = service.get_order(order_id)
    except StorefrontError as e:
        raise http_error(e)

    return {
        "status": "success",
        "data": order.to_dict()
    }


@router.put("/{order_id}/status")
def update_order_status(
    order_id: OrderId,
    payload: OrderStatusUpdate,
    service: OrderService = Depends(get_order_service)
):
    """Change the status of an order"""
    try:
        updated = service.update_status(order_id, payload.status)
    except StorefrontError as e:
        raise http_error(e)

    return {
        "status": "success",
        "updated": updated
    }


@router.delete("/{order_id}")
def delete_order(order_id: OrderId, service: OrderService = Depends(get_order_service)):
    """Delete an order together with its items"""
    try:
        service.delete_order(order_id)
    except StorefrontError as e:
        raise http_error(e)

    return {
        "status": "success",
        "message": f"Order {order_id} deleted"
    }
