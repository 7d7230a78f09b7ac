"""Wheel of fortune spin model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from storefront.stores.postgres import Base


class WheelOfFortuneSpin(Base):
    """A recorded spin (at most one per user per day is allowed)."""

    __tablename__ = "WheelOfFortuneSpin"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        "userId",
        ForeignKey("User.id", ondelete="CASCADE"),
        index=True,
    )
    spun_at: Mapped[datetime] = mapped_column("spunAt", DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        "createdAt",
        DateTime(timezone=True),
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<WheelOfFortuneSpin user={self.user_id} at={self.spun_at}>"
