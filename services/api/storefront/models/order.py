"""Order, OrderItem and ShippingAddress models.

Order items carry the supplier (marketplace) URL of imported products so
fulfilment can re-order from the original listing.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SqlEnum, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storefront.stores.postgres import Base


class OrderStatus(str, Enum):
    """Fulfilment status."""

    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class Order(Base):
    """Customer order."""

    __tablename__ = "Order"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_number: Mapped[str] = mapped_column("orderNumber", String(50), unique=True, index=True)
    order_date: Mapped[datetime] = mapped_column(
        "orderDate",
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
    )

    # Customer
    customer_id: Mapped[str] = mapped_column("customerId", String(100), index=True)
    customer_name: Mapped[str] = mapped_column("customerName", String(255))
    customer_email: Mapped[str] = mapped_column("customerEmail", String(255))

    # Stripe references
    stripe_customer_id: Mapped[str | None] = mapped_column("stripeCustomerId", String(100))
    stripe_checkout_session_id: Mapped[str | None] = mapped_column("stripeCheckoutSessionId", String(100))
    stripe_payment_intent_id: Mapped[str | None] = mapped_column("stripePaymentIntentId", String(100))

    total_price: Mapped[Decimal] = mapped_column("totalPrice", Numeric(10, 2))
    status: Mapped[OrderStatus] = mapped_column(
        SqlEnum(OrderStatus, name="order_status"),
        default=OrderStatus.PROCESSING,
        index=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        "createdAt",
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt",
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )
    shipping_address: Mapped["ShippingAddress | None"] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"<Order {self.order_number} {self.status}>"


class OrderItem(Base):
    """One purchased product line."""

    __tablename__ = "OrderItem"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        "orderId",
        ForeignKey("Order.id", ondelete="CASCADE"),
        index=True,
    )
    sanity_product_id: Mapped[str] = mapped_column("sanityProductId", String(100), index=True)
    product_title: Mapped[str] = mapped_column("productTitle", String(255))
    product_price: Mapped[Decimal] = mapped_column("productPrice", Numeric(10, 2))
    product_image: Mapped[str | None] = mapped_column("productImage", Text)

    # Supplier (marketplace listing the product was imported from)
    supplier_url: Mapped[str | None] = mapped_column("supplierUrl", Text, index=True)
    supplier_name: Mapped[str | None] = mapped_column("supplierName", String(255))
    imported_from_alibaba: Mapped[bool] = mapped_column("importedFromAlibaba", Boolean, default=False)

    quantity: Mapped[int] = mapped_column(Integer)
    line_total: Mapped[Decimal] = mapped_column("lineTotal", Numeric(10, 2))
    created_at: Mapped[datetime] = mapped_column(
        "createdAt",
        DateTime(timezone=True),
        server_default=func.now(),
    )

    order: Mapped[Order] = relationship(back_populates="items")

    def __repr__(self) -> str:
        return f"<OrderItem order={self.order_id} {self.sanity_product_id} x{self.quantity}>"


class ShippingAddress(Base):
    """Shipping address captured at checkout."""

    __tablename__ = "ShippingAddress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        "orderId",
        ForeignKey("Order.id", ondelete="CASCADE"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255))
    line1: Mapped[str] = mapped_column(String(255))
    line2: Mapped[str | None] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(100))
    state: Mapped[str] = mapped_column(String(100))
    postal_code: Mapped[str] = mapped_column("postalCode", String(20))
    country: Mapped[str] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(
        "createdAt",
        DateTime(timezone=True),
        server_default=func.now(),
    )

    order: Mapped[Order] = relationship(back_populates="shipping_address")
