"""Pydantic schemas for API request/response validation."""

from storefront.schemas.auth import Credentials, Registration
from storefront.schemas.cart import CartItemUpdate, CartSync
from storefront.schemas.common import ErrorDetail, ErrorResponse, Pagination, failure, success
from storefront.schemas.home import Banner, CategoriesResponse, Category, HomeResponse
from storefront.schemas.orders import (
    OrderCreate,
    OrderItemIn,
    OrderStatusUpdate,
    ShippingAddressIn,
    first_missing_field,
)
from storefront.schemas.scrape import ScrapeRequest

__all__ = [
    "Banner",
    "CartItemUpdate",
    "CartSync",
    "CategoriesResponse",
    "Category",
    "Credentials",
    "ErrorDetail",
    "ErrorResponse",
    "HomeResponse",
    "OrderCreate",
    "OrderItemIn",
    "OrderStatusUpdate",
    "Pagination",
    "Registration",
    "ScrapeRequest",
    "ShippingAddressIn",
    "failure",
    "first_missing_field",
    "success",
]
