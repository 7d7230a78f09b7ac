"""SQLAlchemy ORM models.

Models represent database tables (quoted CamelCase names shared with the
storefront's original schema):
- User / Session: accounts and login sessions
- Cart / CartLineItem: shopping carts
- Order / OrderItem / ShippingAddress: checkout results with supplier info
- WheelOfFortuneSpin: promotional wheel spins
"""

from storefront.models.cart import Cart, CartLineItem
from storefront.models.order import Order, OrderItem, OrderStatus, ShippingAddress
from storefront.models.user import Session, User
from storefront.models.wheel import WheelOfFortuneSpin

__all__ = [
    "Cart",
    "CartLineItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Session",
    "ShippingAddress",
    "User",
    "WheelOfFortuneSpin",
]
