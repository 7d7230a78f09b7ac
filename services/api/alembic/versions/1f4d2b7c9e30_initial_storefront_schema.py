"""initial_storefront_schema

Revision ID: 1f4d2b7c9e30
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "1f4d2b7c9e30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ORDER_STATUS = postgresql.ENUM(
    "PROCESSING", "SHIPPED", "DELIVERED", "CANCELLED", name="order_status", create_type=False
)


def upgrade() -> None:
    ORDER_STATUS.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "User",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("passwordHash", sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "Session",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("userId", sa.Integer(), nullable=False),
        sa.Column("expiresAt", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["userId"], ["User.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "Cart",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("userId", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["userId"], ["User.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("userId"),
    )

    op.create_table(
        "CartLineItem",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("cartId", sa.Text(), nullable=False),
        sa.Column("sanityProductId", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("image", sa.Text(), nullable=False),
        sa.ForeignKeyConstraint(["cartId"], ["Cart.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "WheelOfFortuneSpin",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("userId", sa.Integer(), nullable=False),
        sa.Column("spunAt", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "createdAt",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["userId"], ["User.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_WheelOfFortuneSpin_userId"), "WheelOfFortuneSpin", ["userId"], unique=False)

    op.create_table(
        "Order",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("orderNumber", sa.String(length=50), nullable=False),
        sa.Column("orderDate", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("customerId", sa.String(length=100), nullable=False),
        sa.Column("customerName", sa.String(length=255), nullable=False),
        sa.Column("customerEmail", sa.String(length=255), nullable=False),
        sa.Column("stripeCustomerId", sa.String(length=100), nullable=True),
        sa.Column("stripeCheckoutSessionId", sa.String(length=100), nullable=True),
        sa.Column("stripePaymentIntentId", sa.String(length=100), nullable=True),
        sa.Column("totalPrice", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("status", ORDER_STATUS, nullable=False),
        sa.Column("createdAt", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updatedAt", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_Order_orderNumber"), "Order", ["orderNumber"], unique=True)
    op.create_index(op.f("ix_Order_orderDate"), "Order", ["orderDate"], unique=False)
    op.create_index(op.f("ix_Order_customerId"), "Order", ["customerId"], unique=False)
    op.create_index(op.f("ix_Order_status"), "Order", ["status"], unique=False)

    op.create_table(
        "OrderItem",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("orderId", sa.Integer(), nullable=False),
        sa.Column("sanityProductId", sa.String(length=100), nullable=False),
        sa.Column("productTitle", sa.String(length=255), nullable=False),
        sa.Column("productPrice", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("productImage", sa.Text(), nullable=True),
        sa.Column("supplierUrl", sa.Text(), nullable=True),
        sa.Column("supplierName", sa.String(length=255), nullable=True),
        sa.Column("importedFromAlibaba", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("lineTotal", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("createdAt", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["orderId"], ["Order.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_OrderItem_orderId"), "OrderItem", ["orderId"], unique=False)
    op.create_index(op.f("ix_OrderItem_sanityProductId"), "OrderItem", ["sanityProductId"], unique=False)
    op.create_index(op.f("ix_OrderItem_supplierUrl"), "OrderItem", ["supplierUrl"], unique=False)

    op.create_table(
        "ShippingAddress",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("orderId", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("line1", sa.String(length=255), nullable=False),
        sa.Column("line2", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=False),
        sa.Column("state", sa.String(length=100), nullable=False),
        sa.Column("postalCode", sa.String(length=20), nullable=False),
        sa.Column("country", sa.String(length=100), nullable=False),
        sa.Column("createdAt", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.ForeignKeyConstraint(["orderId"], ["Order.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_ShippingAddress_orderId"), "ShippingAddress", ["orderId"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_ShippingAddress_orderId"), table_name="ShippingAddress")
    op.drop_table("ShippingAddress")
    op.drop_index(op.f("ix_OrderItem_supplierUrl"), table_name="OrderItem")
    op.drop_index(op.f("ix_OrderItem_sanityProductId"), table_name="OrderItem")
    op.drop_index(op.f("ix_OrderItem_orderId"), table_name="OrderItem")
    op.drop_table("OrderItem")
    op.drop_index(op.f("ix_Order_status"), table_name="Order")
    op.drop_index(op.f("ix_Order_customerId"), table_name="Order")
    op.drop_index(op.f("ix_Order_orderDate"), table_name="Order")
    op.drop_index(op.f("ix_Order_orderNumber"), table_name="Order")
    op.drop_table("Order")
    op.drop_index(op.f("ix_WheelOfFortuneSpin_userId"), table_name="WheelOfFortuneSpin")
    op.drop_table("WheelOfFortuneSpin")
    op.drop_table("CartLineItem")
    op.drop_table("Cart")
    op.drop_table("Session")
    op.drop_table("User")
    ORDER_STATUS.drop(op.get_bind(), checkfirst=True)
