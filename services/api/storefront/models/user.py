"""User and Session models.

Users authenticate with email + password hash; sessions are keyed by the
sha256 hex digest of the opaque token stored in the browser cookie.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from storefront.stores.postgres import Base


class User(Base):
    """Storefront customer or admin account."""

    __tablename__ = "User"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(Text, unique=True)
    password_hash: Mapped[str] = mapped_column("passwordHash", Text)

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email}>"


class Session(Base):
    """Login session."""

    __tablename__ = "Session"

    # sha256 hex of the session token
    id: Mapped[str] = mapped_column(Text, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        "userId",
        ForeignKey("User.id", ondelete="CASCADE"),
    )
    expires_at: Mapped[datetime] = mapped_column("expiresAt", DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Session user={self.user_id} expires={self.expires_at}>"
