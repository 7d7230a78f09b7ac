"""Schemas for the cart API (/api/cart)."""

from decimal import Decimal

from pydantic import BaseModel, Field


class CartItemUpdate(BaseModel):
    """Request body for POST /api/cart/items.

    quantity 0 removes the line.
    """

    cart_id: str | None = Field(alias="cartId", default=None)
    sanity_product_id: str = Field(alias="sanityProductId", min_length=1, max_length=100)
    quantity: int = Field(ge=0)
    title: str | None = Field(default=None, max_length=255)
    price: Decimal | None = Field(default=None, ge=0)
    image: str | None = None

    model_config = {"populate_by_name": True}


class CartSync(BaseModel):
    """Request body for POST /api/cart/sync."""

    cart_id: str | None = Field(alias="cartId", default=None)

    model_config = {"populate_by_name": True}
