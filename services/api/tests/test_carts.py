"""Tests for the cart service against an in-memory session."""

from decimal import Decimal

import pytest
from sqlalchemy.sql.elements import TextClause

from storefront.models import Cart, CartLineItem
from storefront.services.carts import (
    CartError,
    cart_to_dict,
    cleanup_duplicate_carts,
    clear_cart,
    count_carts,
    get_or_create_cart,
    sync_cart_with_user,
    update_cart_item,
)


class _Result:
    def __init__(self, rows=(), scalar=None, rowcount=0):
        self._rows = list(rows)
        self._scalar = scalar
        self.rowcount = rowcount

    def scalar_one_or_none(self):
        return self._scalar

    def scalar_one(self):
        return self._scalar

    def __iter__(self):
        return iter(self._rows)


class _DuplicateRow:
    def __init__(self, cart_id, count):
        self.id = cart_id
        self.count = count


class FakeCartSession:
    """Stand-in for AsyncSession covering the statements the cart service issues.

    `duplicates` maps cart id -> number of physical rows, for the ctid cleanup.
    """

    def __init__(self, carts=(), duplicates=None):
        self.carts: dict[str, Cart] = {cart.id: cart for cart in carts}
        self.duplicates: dict[str, int] = dict(duplicates or {})
        self.deleted: list[Cart] = []

    async def get(self, model, ident):
        return self.carts.get(ident)

    def add(self, obj):
        self.carts[obj.id] = obj

    async def delete(self, obj):
        self.carts.pop(obj.id, None)
        self.deleted.append(obj)

    async def flush(self):
        pass

    async def execute(self, statement, params=None):
        if isinstance(statement, TextClause):
            if statement.text.startswith("DELETE"):
                cart_id = params["id"]
                removed = self.duplicates.get(cart_id, 1) - 1
                self.duplicates[cart_id] = 1
                return _Result(rowcount=removed)
            return _Result(
                rows=[_DuplicateRow(cart_id, n) for cart_id, n in self.duplicates.items() if n > 1]
            )

        if statement.whereclause is None:
            return _Result(scalar=len(self.carts))

        user_id = statement.whereclause.right.value
        owned = [cart for cart in self.carts.values() if cart.user_id == user_id]
        return _Result(scalar=owned[0] if owned else None)


def _cart(cart_id: str, user_id: int | None = None, quantities: dict[str, int] | None = None) -> Cart:
    cart = Cart(id=cart_id, user_id=user_id)
    cart.items = [
        CartLineItem(
            sanity_product_id=product_id,
            quantity=quantity,
            title=f"Product {product_id}",
            price=Decimal("10.00"),
            image="",
        )
        for product_id, quantity in (quantities or {}).items()
    ]
    return cart


def _quantities(cart: Cart) -> dict[str, int]:
    return {item.sanity_product_id: item.quantity for item in cart.items}


# ============================================================
# Resolving carts
# ============================================================


@pytest.mark.asyncio
async def test_missing_cart_id_creates_cart():
    session = FakeCartSession()

    cart = await get_or_create_cart(session, None)

    assert cart.id in session.carts
    assert cart.user_id is None
    assert cart.items == []


@pytest.mark.asyncio
async def test_unknown_cart_id_creates_fresh_cart():
    session = FakeCartSession()

    cart = await get_or_create_cart(session, "gone")

    assert cart.id != "gone"
    assert cart.id in session.carts


@pytest.mark.asyncio
async def test_cart_owned_by_another_user_yields_fresh_cart():
    theirs = _cart("c-theirs", user_id=7, quantities={"p1": 1})
    session = FakeCartSession([theirs])

    cart = await get_or_create_cart(session, "c-theirs", user_id=8)

    assert cart.id != "c-theirs"
    assert cart.user_id == 8
    assert cart.items == []
    assert _quantities(theirs) == {"p1": 1}


@pytest.mark.asyncio
async def test_anonymous_request_cannot_use_owned_cart():
    session = FakeCartSession([_cart("c-owned", user_id=7)])

    cart = await get_or_create_cart(session, "c-owned")

    assert cart.id != "c-owned"
    assert cart.user_id is None


@pytest.mark.asyncio
async def test_signed_in_user_cart_wins_over_cookie_cart():
    mine = _cart("c-mine", user_id=5)
    session = FakeCartSession([mine, _cart("c-anon")])

    assert await get_or_create_cart(session, "c-anon", user_id=5) is mine


# ============================================================
# Line items
# ============================================================


@pytest.mark.asyncio
async def test_quantity_zero_removes_line():
    session = FakeCartSession([_cart("c1", quantities={"p1": 2, "p2": 1})])

    cart = await update_cart_item(session, "c1", "p1", quantity=0)

    assert _quantities(cart) == {"p2": 1}


@pytest.mark.asyncio
async def test_positive_quantity_updates_existing_line():
    session = FakeCartSession([_cart("c1", quantities={"p1": 2})])

    cart = await update_cart_item(session, "c1", "p1", quantity=5)

    assert _quantities(cart) == {"p1": 5}


@pytest.mark.asyncio
async def test_positive_quantity_adds_line():
    session = FakeCartSession([_cart("c1")])

    cart = await update_cart_item(
        session, "c1", "p9", quantity=3, title="Rose Serum", price=12.5, image="https://cdn/x.jpg"
    )

    (line,) = cart.items
    assert (line.sanity_product_id, line.quantity, line.title) == ("p9", 3, "Rose Serum")
    assert line.price == Decimal("12.5")
    assert line.image == "https://cdn/x.jpg"


@pytest.mark.asyncio
async def test_quantity_zero_for_missing_line_is_noop():
    session = FakeCartSession([_cart("c1", quantities={"p1": 1})])

    cart = await update_cart_item(session, "c1", "p2", quantity=0)

    assert _quantities(cart) == {"p1": 1}


@pytest.mark.asyncio
async def test_negative_quantity_is_rejected():
    session = FakeCartSession([_cart("c1")])

    with pytest.raises(CartError):
        await update_cart_item(session, "c1", "p1", quantity=-1)


@pytest.mark.asyncio
async def test_clear_cart_removes_all_lines():
    cart = _cart("c1", quantities={"p1": 1, "p2": 4})
    session = FakeCartSession([cart])

    await clear_cart(session, "c1")

    assert cart.items == []


def test_cart_to_dict_totals():
    payload = cart_to_dict(_cart("c1", user_id=3, quantities={"p1": 2, "p2": 1}))

    assert payload["id"] == "c1"
    assert payload["userId"] == 3
    assert payload["itemCount"] == 3
    assert payload["subtotal"] == 30.0
    assert {item["sanityProductId"] for item in payload["items"]} == {"p1", "p2"}


# ============================================================
# Sign-in sync
# ============================================================


@pytest.mark.asyncio
async def test_sync_merges_quantities_and_deletes_anonymous_cart():
    mine = _cart("c-mine", user_id=5, quantities={"p1": 1, "p2": 2})
    anonymous = _cart("c-anon", quantities={"p1": 3, "p3": 1})
    session = FakeCartSession([mine, anonymous])

    cart = await sync_cart_with_user(session, "c-anon", 5)

    assert cart is mine
    assert _quantities(cart) == {"p1": 4, "p2": 2, "p3": 1}
    assert session.deleted == [anonymous]
    assert "c-anon" not in session.carts


@pytest.mark.asyncio
async def test_sync_links_anonymous_cart_when_user_has_none():
    anonymous = _cart("c-anon", quantities={"p1": 2})
    session = FakeCartSession([anonymous])

    cart = await sync_cart_with_user(session, "c-anon", 5)

    assert cart is anonymous
    assert cart.user_id == 5
    assert session.deleted == []


@pytest.mark.asyncio
async def test_sync_ignores_cart_owned_by_another_user():
    mine = _cart("c-mine", user_id=5, quantities={"p1": 1})
    theirs = _cart("c-theirs", user_id=7, quantities={"p2": 9})
    session = FakeCartSession([mine, theirs])

    cart = await sync_cart_with_user(session, "c-theirs", 5)

    assert cart is mine
    assert _quantities(cart) == {"p1": 1}
    assert theirs.user_id == 7
    assert session.deleted == []


@pytest.mark.asyncio
async def test_sync_without_cart_id_creates_user_cart():
    session = FakeCartSession()

    cart = await sync_cart_with_user(session, None, 5)

    assert cart.user_id == 5
    assert cart.id in session.carts


# ============================================================
# Maintenance
# ============================================================


@pytest.mark.asyncio
async def test_cleanup_duplicate_carts_keeps_one_row_per_id():
    session = FakeCartSession([_cart("c1"), _cart("c2")], duplicates={"c1": 3, "c2": 2, "c3": 1})

    deleted = await cleanup_duplicate_carts(session)

    assert deleted == {"c1": 2, "c2": 1}
    assert session.duplicates == {"c1": 1, "c2": 1, "c3": 1}
    assert await cleanup_duplicate_carts(session) == {}


@pytest.mark.asyncio
async def test_count_carts():
    session = FakeCartSession([_cart("c1"), _cart("c2", user_id=1)])

    assert await count_carts(session) == 2
