"""Order endpoints used by checkout and the admin fulfilment tools.

GET   /api/orders                      - List orders (optionally with supplier info)
POST  /api/orders                      - Create an order
GET   /api/orders/{id}                 - Order with items and shipping address
PATCH /api/orders/{id}                 - Update fulfilment status
GET   /api/orders/{id}/supplier-urls   - Marketplace URLs to reorder from
"""

import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from storefront.schemas import OrderCreate, OrderStatusUpdate, Pagination, failure, first_missing_field, success
from storefront.services.orders import (
    clamp_page,
    create_order,
    get_order_supplier_urls,
    get_order_with_details,
    list_orders,
    list_orders_with_supplier_info,
    update_order_status,
)
from storefront.stores.postgres import get_session

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


def _parse_order_id(raw: str) -> int | None:
    try:
        return int(raw)
    except ValueError:
        return None


@router.get("")
async def get_orders(
    limit: int = Query(default=50, ge=1),
    offset: int = Query(default=0, ge=0),
    include_supplier_info: bool = Query(default=False, alias="includeSupplierInfo"),
) -> JSONResponse:
    """List orders, newest first."""
    limit, offset = clamp_page(limit, offset)
    try:
        async with get_session() as session:
            if include_supplier_info:
                orders = await list_orders_with_supplier_info(session, limit, offset)
            else:
                orders = await list_orders(session, limit, offset)
    except SQLAlchemyError:
        logger.exception("[orders] failed to fetch orders")
        return JSONResponse(status_code=500, content=failure("Failed to fetch orders"))

    return JSONResponse(
        content=success(
            orders,
            pagination=Pagination(limit=limit, offset=offset, total=len(orders)).model_dump(),
        )
    )


@router.post("")
async def post_order(request: Request) -> JSONResponse:
    """Create an order.

    The body is checked for required fields before model validation so that
    the first missing field is reported by name.
    """
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse(status_code=400, content=failure("Invalid JSON body"))
    if not isinstance(body, dict):
        return JSONResponse(status_code=400, content=failure("Invalid JSON body"))

    missing = first_missing_field(body)
    if missing:
        return JSONResponse(status_code=400, content=failure(f"Missing required field: {missing}"))

    try:
        data = OrderCreate.model_validate(body)
    except ValidationError as e:
        return JSONResponse(
            status_code=400,
            content=failure("Invalid order", details=e.errors(include_url=False, include_context=False)),
        )

    try:
        async with get_session() as session:
            order = await create_order(session, data)
    except SQLAlchemyError:
        logger.exception(f"[orders] failed to create order {data.order_number}")
        return JSONResponse(status_code=500, content=failure("Failed to create order"))

    return JSONResponse(status_code=201, content=success(order))


@router.get("/{order_id}")
async def get_order(order_id: str) -> JSONResponse:
    parsed_id = _parse_order_id(order_id)
    if parsed_id is None:
        return JSONResponse(status_code=400, content=failure("Invalid order ID"))

    try:
        async with get_session() as session:
            order = await get_order_with_details(session, parsed_id)
    except SQLAlchemyError:
        logger.exception(f"[orders] failed to fetch order={parsed_id}")
        return JSONResponse(status_code=500, content=failure("Failed to fetch order"))

    if order is None:
        return JSONResponse(status_code=404, content=failure("Order not found"))
    return JSONResponse(content=success(order))


@router.patch("/{order_id}")
async def patch_order_status(order_id: str, update: OrderStatusUpdate) -> JSONResponse:
    parsed_id = _parse_order_id(order_id)
    if parsed_id is None:
        return JSONResponse(status_code=400, content=failure("Invalid order ID"))

    try:
        async with get_session() as session:
            order = await update_order_status(session, parsed_id, update.status)
    except SQLAlchemyError:
        logger.exception(f"[orders] failed to update status order={parsed_id}")
        return JSONResponse(status_code=500, content=failure("Failed to update order"))

    if order is None:
        return JSONResponse(status_code=404, content=failure("Order not found"))
    return JSONResponse(content=success(order))


@router.get("/{order_id}/supplier-urls")
async def get_supplier_urls(order_id: str) -> JSONResponse:
    """Distinct supplier URLs of an order's items."""
    parsed_id = _parse_order_id(order_id)
    if parsed_id is None:
        return JSONResponse(status_code=400, content=failure("Invalid order ID"))

    try:
        async with get_session() as session:
            urls = await get_order_supplier_urls(session, parsed_id)
    except SQLAlchemyError:
        logger.exception(f"[orders] failed to fetch supplier URLs order={parsed_id}")
        return JSONResponse(status_code=500, content=failure("Failed to fetch supplier URLs"))

    return JSONResponse(
        content=success({"orderId": parsed_id, "supplierUrls": urls, "count": len(urls)})
    )
