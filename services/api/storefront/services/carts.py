"""Cart service: anonymous and user carts.

Rules:
- A signed-in user's own cart wins over the cart id in the cookie
- Unknown or missing cart ids get a fresh cart (uuid4)
- Quantity 0 removes a line; positive quantity sets it (or adds the line)
- On sign-in an anonymous cart is merged into the user's cart
  (quantities summed per product) and then deleted
"""

import logging
from decimal import Decimal
from typing import Any
from uuid import uuid4

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import Cart, CartLineItem

logger = logging.getLogger("uvicorn.error")


class CartError(RuntimeError):
    """Raised for cart operations that cannot be applied."""


def cart_to_dict(cart: Cart) -> dict[str, Any]:
    """Serialize a cart with its items."""
    items = [
        {
            "id": item.id,
            "sanityProductId": item.sanity_product_id,
            "quantity": item.quantity,
            "title": item.title,
            "price": float(item.price),
            "image": item.image,
        }
        for item in cart.items
    ]
    return {
        "id": cart.id,
        "userId": cart.user_id,
        "items": items,
        "itemCount": sum(item["quantity"] for item in items),
        "subtotal": round(sum(item["price"] * item["quantity"] for item in items), 2),
    }


async def find_cart(session: AsyncSession, cart_id: str) -> Cart | None:
    return await session.get(Cart, cart_id)


async def find_cart_by_user(session: AsyncSession, user_id: int) -> Cart | None:
    result = await session.execute(select(Cart).where(Cart.user_id == user_id))
    return result.scalar_one_or_none()


async def create_cart(
    session: AsyncSession,
    cart_id: str | None = None,
    user_id: int | None = None,
) -> Cart:
    """Create a cart, or return the existing one with that id."""
    if cart_id:
        existing = await find_cart(session, cart_id)
        if existing:
            return existing

    cart = Cart(id=cart_id or str(uuid4()), user_id=user_id)
    cart.items = []
    session.add(cart)
    await session.flush()
    logger.info(f"[cart] created cart {cart.id} user={user_id}")
    return cart


async def get_or_create_cart(
    session: AsyncSession,
    cart_id: str | None = None,
    user_id: int | None = None,
) -> Cart:
    """Resolve the cart for a request."""
    if user_id is not None:
        user_cart = await find_cart_by_user(session, user_id)
        if user_cart:
            return user_cart

    if not cart_id:
        return await create_cart(session, user_id=user_id)

    cart = await find_cart(session, cart_id)
    if cart is None:
        return await create_cart(session, user_id=user_id)
    if cart.user_id is not None and cart.user_id != user_id:
        # Cookie points at someone else's cart
        return await create_cart(session, user_id=user_id)
    return cart


async def update_cart_item(
    session: AsyncSession,
    cart_id: str | None,
    sanity_product_id: str,
    *,
    quantity: int,
    title: str | None = None,
    price: Decimal | float | None = None,
    image: str | None = None,
    user_id: int | None = None,
) -> Cart:
    """Set the quantity of one product in the cart."""
    if quantity < 0:
        raise CartError("Quantity must not be negative")

    cart = await get_or_create_cart(session, cart_id, user_id)
    existing = next((i for i in cart.items if i.sanity_product_id == sanity_product_id), None)

    if existing is not None:
        if quantity == 0:
            cart.items.remove(existing)
        else:
            existing.quantity = quantity
    elif quantity > 0:
        cart.items.append(
            CartLineItem(
                sanity_product_id=sanity_product_id,
                quantity=quantity,
                title=title or "",
                price=Decimal(str(price or 0)),
                image=image or "",
            )
        )

    await session.flush()
    return cart


async def sync_cart_with_user(session: AsyncSession, cart_id: str | None, user_id: int) -> Cart:
    """Attach or merge the cookie cart into the signed-in user's cart."""
    user_cart = await find_cart_by_user(session, user_id)

    if not cart_id:
        return user_cart or await create_cart(session, user_id=user_id)

    anonymous_cart = await find_cart(session, cart_id)
    if anonymous_cart is not None and anonymous_cart.user_id not in (None, user_id):
        anonymous_cart = None

    if anonymous_cart is None:
        return user_cart or await create_cart(session, user_id=user_id)

    if user_cart is None:
        anonymous_cart.user_id = user_id
        await session.flush()
        logger.info(f"[cart] linked cart {anonymous_cart.id} to user={user_id}")
        return anonymous_cart

    if user_cart.id == anonymous_cart.id:
        return user_cart

    for item in anonymous_cart.items:
        existing = next(
            (i for i in user_cart.items if i.sanity_product_id == item.sanity_product_id),
            None,
        )
        if existing is not None:
            existing.quantity += item.quantity
        else:
            user_cart.items.append(
                CartLineItem(
                    sanity_product_id=item.sanity_product_id,
                    quantity=item.quantity,
                    title=item.title,
                    price=item.price,
                    image=item.image,
                )
            )

    await session.delete(anonymous_cart)
    await session.flush()
    logger.info(f"[cart] merged cart {cart_id} into {user_cart.id} user={user_id}")
    return user_cart


async def clear_cart(session: AsyncSession, cart_id: str) -> None:
    cart = await find_cart(session, cart_id)
    if cart is not None:
        cart.items.clear()
        await session.flush()


# ============================================================
# Maintenance
# ============================================================


async def find_duplicate_cart_ids(session: AsyncSession) -> list[tuple[str, int]]:
    """Cart ids stored more than once (possible only on tables missing the PK)."""
    result = await session.execute(
        text('SELECT id, COUNT(*) AS count FROM "Cart" GROUP BY id HAVING COUNT(*) > 1')
    )
    return [(row.id, int(row.count)) for row in result]


async def cleanup_duplicate_carts(session: AsyncSession) -> dict[str, int]:
    """Keep one physical row per duplicated cart id.

    Returns:
        Mapping of cart id -> number of rows deleted.
    """
    deleted: dict[str, int] = {}
    for cart_id, count in await find_duplicate_cart_ids(session):
        logger.warning(f"[cart] duplicate cart id={cart_id} instances={count}")
        result = await session.execute(
            text(
                'DELETE FROM "Cart" WHERE id = :id '
                'AND ctid NOT IN (SELECT ctid FROM "Cart" WHERE id = :id LIMIT 1)'
            ),
            {"id": cart_id},
        )
        deleted[cart_id] = result.rowcount or 0
    return deleted


async def count_carts(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(Cart))
    return int(result.scalar_one())
