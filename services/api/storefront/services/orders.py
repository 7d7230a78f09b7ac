"""Order service: checkout results and supplier (marketplace) lookups.

Routes are thin; everything that touches the Order tables lives here.
Rows are serialized with the camelCase column names the storefront and
admin tooling already consume.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import Order, OrderItem, OrderStatus, ShippingAddress
from storefront.schemas.orders import OrderCreate

logger = logging.getLogger("uvicorn.error")

MAX_PAGE_SIZE = 200


def _money(value: Decimal | float | None) -> float | None:
    return float(value) if value is not None else None


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def order_to_dict(order: Order) -> dict[str, Any]:
    """Serialize an order row (without items)."""
    return {
        "id": order.id,
        "orderNumber": order.order_number,
        "orderDate": _iso(order.order_date),
        "customerId": order.customer_id,
        "customerName": order.customer_name,
        "customerEmail": order.customer_email,
        "stripeCustomerId": order.stripe_customer_id,
        "stripeCheckoutSessionId": order.stripe_checkout_session_id,
        "stripePaymentIntentId": order.stripe_payment_intent_id,
        "totalPrice": _money(order.total_price),
        "status": order.status.value if isinstance(order.status, OrderStatus) else order.status,
        "createdAt": _iso(order.created_at),
        "updatedAt": _iso(order.updated_at),
    }


def order_item_to_dict(item: OrderItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "orderId": item.order_id,
        "sanityProductId": item.sanity_product_id,
        "productTitle": item.product_title,
        "productPrice": _money(item.product_price),
        "productImage": item.product_image,
        "supplierUrl": item.supplier_url,
        "supplierName": item.supplier_name,
        "importedFromAlibaba": item.imported_from_alibaba,
        "quantity": item.quantity,
        "lineTotal": _money(item.line_total),
    }


def shipping_address_to_dict(address: ShippingAddress) -> dict[str, Any]:
    return {
        "id": address.id,
        "orderId": address.order_id,
        "name": address.name,
        "line1": address.line1,
        "line2": address.line2,
        "city": address.city,
        "state": address.state,
        "postalCode": address.postal_code,
        "country": address.country,
    }


def order_with_details_to_dict(order: Order) -> dict[str, Any]:
    payload = order_to_dict(order)
    payload["orderItems"] = [order_item_to_dict(item) for item in order.items]
    payload["shippingAddress"] = (
        shipping_address_to_dict(order.shipping_address) if order.shipping_address else None
    )
    return payload


def clamp_page(limit: int, offset: int) -> tuple[int, int]:
    """Keep pagination inside sane bounds."""
    return max(1, min(int(limit), MAX_PAGE_SIZE)), max(0, int(offset))


async def list_orders(session: AsyncSession, limit: int = 50, offset: int = 0) -> list[dict[str, Any]]:
    """Orders, newest first."""
    limit, offset = clamp_page(limit, offset)
    result = await session.execute(
        select(Order).order_by(Order.order_date.desc()).limit(limit).offset(offset)
    )
    return [order_to_dict(order) for order in result.scalars().all()]


async def list_orders_with_supplier_info(
    session: AsyncSession,
    limit: int = 50,
    offset: int = 0,
) -> list[dict[str, Any]]:
    """Orders left-joined with their items' supplier columns (one row per item)."""
    limit, offset = clamp_page(limit, offset)
    result = await session.execute(
        select(
            Order,
            OrderItem.supplier_url,
            OrderItem.supplier_name,
            OrderItem.imported_from_alibaba,
            OrderItem.product_title,
            OrderItem.product_image,
        )
        .outerjoin(OrderItem, OrderItem.order_id == Order.id)
        .order_by(Order.order_date.desc())
        .limit(limit)
        .offset(offset)
    )

    rows = []
    for order, supplier_url, supplier_name, imported, title, image in result.all():
        row = order_to_dict(order)
        row.update(
            {
                "supplierUrl": supplier_url,
                "supplierName": supplier_name,
                "importedFromAlibaba": imported,
                "productTitle": title,
                "productImage": image,
            }
        )
        rows.append(row)
    return rows


async def create_order(session: AsyncSession, data: OrderCreate) -> dict[str, Any]:
    """Insert an order with optional items and shipping address."""
    order = Order(
        order_number=data.order_number,
        order_date=data.order_date or datetime.now(timezone.utc),
        customer_id=data.customer_id,
        customer_name=data.customer_name,
        customer_email=data.customer_email,
        stripe_customer_id=data.stripe_customer_id,
        stripe_checkout_session_id=data.stripe_checkout_session_id,
        stripe_payment_intent_id=data.stripe_payment_intent_id,
        total_price=data.total_price,
        status=data.status,
    )
    order.items = [
        OrderItem(
            sanity_product_id=item.sanity_product_id,
            product_title=item.product_title,
            product_price=item.product_price,
            product_image=item.product_image,
            supplier_url=item.supplier_url,
            supplier_name=item.supplier_name,
            imported_from_alibaba=item.imported_from_alibaba,
            quantity=item.quantity,
            line_total=(
                item.line_total if item.line_total is not None else item.product_price * item.quantity
            ),
        )
        for item in data.order_items
    ]
    if data.shipping_address:
        address = data.shipping_address
        order.shipping_address = ShippingAddress(
            name=address.name,
            line1=address.line1,
            line2=address.line2,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
        )

    session.add(order)
    await session.flush()
    await session.refresh(order)

    logger.info(f"[orders] created order {order.order_number} id={order.id} items={len(order.items)}")
    return order_with_details_to_dict(order)


async def get_order_with_details(session: AsyncSession, order_id: int) -> dict[str, Any] | None:
    """Order with items and shipping address, or None."""
    order = await session.get(Order, order_id)
    if order is None:
        return None
    return order_with_details_to_dict(order)


async def update_order_status(
    session: AsyncSession,
    order_id: int,
    status: OrderStatus,
) -> dict[str, Any] | None:
    """Set the fulfilment status; None if the order does not exist."""
    order = await session.get(Order, order_id)
    if order is None:
        return None
    order.status = status
    await session.flush()
    await session.refresh(order)
    logger.info(f"[orders] order id={order_id} status -> {status.value}")
    return order_to_dict(order)


async def get_order_supplier_urls(session: AsyncSession, order_id: int) -> list[str]:
    """Distinct supplier URLs of an order's items (NULL/empty skipped)."""
    result = await session.execute(
        select(OrderItem.supplier_url)
        .where(OrderItem.order_id == order_id, OrderItem.supplier_url.is_not(None))
        .distinct()
    )
    return [url for url in result.scalars().all() if url]
