"""Cart endpoints.

GET  /api/cart        - Resolve (or create) the cart for this request
POST /api/cart/items  - Set the quantity of one product (0 removes it)
POST /api/cart/sync   - Merge the anonymous cart into the signed-in user's cart
DELETE /api/cart      - Empty the cart

The anonymous cart id is kept client-side and sent as `cartId`; the signed-in
user comes from the session cookie.
"""

from fastapi import APIRouter, Cookie, Query
from fastapi.responses import JSONResponse

from storefront.schemas import CartItemUpdate, CartSync, failure, success
from storefront.services.auth import SESSION_COOKIE_NAME, resolve_user
from storefront.services.carts import (
    CartError,
    cart_to_dict,
    clear_cart,
    get_or_create_cart,
    sync_cart_with_user,
    update_cart_item,
)
from storefront.stores.postgres import get_session

router = APIRouter()


@router.get("")
async def get_cart(
    cart_id: str | None = Query(default=None, alias="cartId"),
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> JSONResponse:
    async with get_session() as session:
        user = await resolve_user(session, session_token)
        cart = await get_or_create_cart(session, cart_id, user.id if user else None)
        payload = cart_to_dict(cart)
    return JSONResponse(content=success(payload))


@router.post("/items")
async def post_cart_item(
    update: CartItemUpdate,
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> JSONResponse:
    try:
        async with get_session() as session:
            user = await resolve_user(session, session_token)
            cart = await update_cart_item(
                session,
                update.cart_id,
                update.sanity_product_id,
                quantity=update.quantity,
                title=update.title,
                price=update.price,
                image=update.image,
                user_id=user.id if user else None,
            )
            payload = cart_to_dict(cart)
    except CartError as e:
        return JSONResponse(status_code=400, content=failure(str(e)))

    return JSONResponse(content=success(payload))


@router.post("/sync")
async def post_cart_sync(
    body: CartSync,
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> JSONResponse:
    """Called right after sign-in."""
    async with get_session() as session:
        user = await resolve_user(session, session_token)
        if user is None:
            return JSONResponse(status_code=401, content=failure("Not signed in"))
        cart = await sync_cart_with_user(session, body.cart_id, user.id)
        payload = cart_to_dict(cart)
    return JSONResponse(content=success(payload))


@router.delete("")
async def delete_cart_items(
    cart_id: str | None = Query(default=None, alias="cartId"),
    session_token: str | None = Cookie(default=None, alias=SESSION_COOKIE_NAME),
) -> JSONResponse:
    """Remove every line (after checkout)."""
    async with get_session() as session:
        user = await resolve_user(session, session_token)
        cart = await get_or_create_cart(session, cart_id, user.id if user else None)
        await clear_cart(session, cart.id)
        payload = cart_to_dict(cart)
    return JSONResponse(content=success(payload))
