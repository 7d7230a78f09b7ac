"""Cart and CartLineItem models.

A cart is either anonymous (userId NULL, id kept in a browser cookie) or
owned by exactly one user. Line items reference CMS products by id.
"""

from decimal import Decimal
from uuid import uuid4

from sqlalchemy import ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.stores.postgres import Base


def generate_line_item_id() -> str:
    """Generate unique line item ID."""
    return str(uuid4())


class Cart(Base):
    """Shopping cart."""

    __tablename__ = "Cart"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    user_id: Mapped[int | None] = mapped_column(
        "userId",
        ForeignKey("User.id", ondelete="CASCADE"),
        unique=True,
    )

    items: Mapped[list["CartLineItem"]] = relationship(
        back_populates="cart",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Cart {self.id} user={self.user_id}>"


class CartLineItem(Base):
    """One product line in a cart."""

    __tablename__ = "CartLineItem"

    id: Mapped[str] = mapped_column(Text, primary_key=True, default=generate_line_item_id)
    cart_id: Mapped[str] = mapped_column(
        "cartId",
        ForeignKey("Cart.id", ondelete="CASCADE"),
    )
    sanity_product_id: Mapped[str] = mapped_column("sanityProductId", Text)
    quantity: Mapped[int] = mapped_column(Integer)
    title: Mapped[str] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    image: Mapped[str] = mapped_column(Text)

    cart: Mapped[Cart] = relationship(back_populates="items")

    def __repr__(self) -> str:
        return f"<CartLineItem {self.sanity_product_id} x{self.quantity}>"
