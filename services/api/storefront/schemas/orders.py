"""Schemas for the orders API (/api/orders)."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from storefront.models import OrderStatus

REQUIRED_ORDER_FIELDS = ("orderNumber", "customerId", "customerName", "customerEmail", "totalPrice")


class OrderItemIn(BaseModel):
    """One line of an order being created."""

    sanity_product_id: str = Field(alias="sanityProductId", min_length=1, max_length=100)
    product_title: str = Field(alias="productTitle", min_length=1, max_length=255)
    product_price: Decimal = Field(alias="productPrice", ge=0)
    product_image: str | None = Field(alias="productImage", default=None)
    supplier_url: str | None = Field(alias="supplierUrl", default=None)
    supplier_name: str | None = Field(alias="supplierName", default=None, max_length=255)
    imported_from_alibaba: bool = Field(alias="importedFromAlibaba", default=False)
    quantity: int = Field(ge=1)
    line_total: Decimal | None = Field(alias="lineTotal", default=None, ge=0)

    model_config = {"populate_by_name": True}


class ShippingAddressIn(BaseModel):
    """Shipping address captured at checkout."""

    name: str = Field(min_length=1, max_length=255)
    line1: str = Field(min_length=1, max_length=255)
    line2: str | None = Field(default=None, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    state: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(alias="postalCode", min_length=1, max_length=20)
    country: str = Field(min_length=1, max_length=100)

    model_config = {"populate_by_name": True}


class OrderCreate(BaseModel):
    """Request body for POST /api/orders."""

    order_number: str = Field(alias="orderNumber", max_length=50)
    order_date: datetime | None = Field(alias="orderDate", default=None)
    customer_id: str = Field(alias="customerId", max_length=100)
    customer_name: str = Field(alias="customerName", max_length=255)
    customer_email: str = Field(alias="customerEmail", max_length=255)
    stripe_customer_id: str | None = Field(alias="stripeCustomerId", default=None)
    stripe_checkout_session_id: str | None = Field(alias="stripeCheckoutSessionId", default=None)
    stripe_payment_intent_id: str | None = Field(alias="stripePaymentIntentId", default=None)
    total_price: Decimal = Field(alias="totalPrice", ge=0)
    status: OrderStatus = OrderStatus.PROCESSING
    order_items: list[OrderItemIn] = Field(alias="orderItems", default_factory=list)
    shipping_address: ShippingAddressIn | None = Field(alias="shippingAddress", default=None)

    model_config = {"populate_by_name": True}


class OrderStatusUpdate(BaseModel):
    """Request body for PATCH /api/orders/{id}."""

    status: OrderStatus


def first_missing_field(body: dict) -> str | None:
    """First required order field that is absent or falsy, in declaration order."""
    for name in REQUIRED_ORDER_FIELDS:
        if not body.get(name):
            return name
    return None
