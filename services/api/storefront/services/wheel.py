"""Wheel of fortune: daily prize wheel for customers above a spend threshold.

- The wheel shows the first 7 CMS products
- The winning slot is a deterministic function of today's date
- A user is eligible when their completed CMS orders total at least the
  minimum purchase and they have not spun today
"""

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from typing import Any

from redis.exceptions import RedisError
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import WheelOfFortuneSpin
from storefront.services.cms_client import CmsError, SanityClient, get_cms_client
from storefront.settings import get_settings
from storefront.stores.redis import PREFIX_WHEEL, TTL_WHEEL_CONFIG, cache_get_json, cache_set_json

logger = logging.getLogger("uvicorn.error")

WHEEL_PRODUCTS_QUERY = '*[_type == "product"][0..6]'
COMPLETED_ORDERS_QUERY = '*[_type == "order" && customerId == $userId && status == "COMPLETED"]{ totalPrice }'


@dataclass
class WheelEligibility:
    """Eligibility result shown on the wheel banner."""

    is_eligible: bool
    reason: str
    total_spent: float
    minimum_required: float
    remaining_amount: float
    has_spun_today: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "isEligible": data["is_eligible"],
            "reason": data["reason"],
            "totalSpent": data["total_spent"],
            "minimumRequired": data["minimum_required"],
            "remainingAmount": data["remaining_amount"],
            "hasSpunToday": data["has_spun_today"],
        }


def compute_winning_index(today: date, product_count: int) -> int | None:
    """Winning slot for `today` (month counted from zero); None for an empty wheel."""
    if product_count <= 0:
        return None
    return (today.day * 31 + (today.month - 1) * 12 + today.year) % product_count


async def get_wheel_configuration(
    cms: SanityClient | None = None,
    today: date | None = None,
) -> dict[str, Any]:
    """Products on the wheel and today's winning index."""
    today = today or datetime.now(timezone.utc).date()
    cache_key = f"{PREFIX_WHEEL}config:{today.isoformat()}"

    try:
        cached = await cache_get_json(cache_key)
        if cached:
            return cached
    except (RedisError, RuntimeError) as e:
        logger.warning(f"[wheel] cache read failed: {e}")

    products = await (cms or get_cms_client()).fetch(WHEEL_PRODUCTS_QUERY) or []
    config = {
        "randomProducts": products,
        "winningIndex": compute_winning_index(today, len(products)),
    }

    try:
        await cache_set_json(cache_key, config, TTL_WHEEL_CONFIG)
    except (RedisError, RuntimeError) as e:
        logger.warning(f"[wheel] cache write failed: {e}")

    return config


async def find_user_spins_today(session: AsyncSession, user_id: int) -> list[WheelOfFortuneSpin]:
    result = await session.execute(
        select(WheelOfFortuneSpin).where(
            WheelOfFortuneSpin.user_id == user_id,
            func.date(WheelOfFortuneSpin.created_at) == func.current_date(),
        )
    )
    return list(result.scalars().all())


async def get_total_spent(user_id: int, cms: SanityClient | None = None) -> float:
    """Sum of the user's completed CMS orders."""
    orders = await (cms or get_cms_client()).fetch(COMPLETED_ORDERS_QUERY, {"userId": str(user_id)}) or []
    return float(sum(order.get("totalPrice") or 0 for order in orders))


async def check_eligibility(
    session: AsyncSession,
    user_id: int | None,
    cms: SanityClient | None = None,
) -> WheelEligibility:
    """Whether `user_id` may spin the wheel now."""
    minimum = get_settings().wheel_minimum_purchase

    if user_id is None:
        return WheelEligibility(
            is_eligible=False,
            reason="Please sign in to check your eligibility",
            total_spent=0.0,
            minimum_required=minimum,
            remaining_amount=minimum,
        )

    try:
        total_spent = await get_total_spent(user_id, cms)
        has_spun_today = len(await find_user_spins_today(session, user_id)) > 0
    except (CmsError, SQLAlchemyError) as e:
        logger.error(f"[wheel] eligibility check failed user={user_id}: {e}")
        return WheelEligibility(
            is_eligible=False,
            reason="Unable to check eligibility at this time",
            total_spent=0.0,
            minimum_required=minimum,
            remaining_amount=minimum,
        )

    remaining = max(0.0, minimum - total_spent)
    is_eligible = total_spent >= minimum and not has_spun_today

    if is_eligible:
        reason = "You're eligible to spin the wheel!"
    elif has_spun_today:
        reason = "You've already spun the wheel today. Come back tomorrow!"
    else:
        reason = f"Spend ${remaining:.2f} more to unlock the wheel of fortune"

    return WheelEligibility(
        is_eligible=is_eligible,
        reason=reason,
        total_spent=total_spent,
        minimum_required=minimum,
        remaining_amount=remaining,
        has_spun_today=has_spun_today,
    )


async def record_spin(session: AsyncSession, user_id: int) -> WheelOfFortuneSpin:
    spin = WheelOfFortuneSpin(user_id=user_id, spun_at=datetime.now(timezone.utc))
    session.add(spin)
    await session.flush()
    logger.info(f"[wheel] spin recorded user={user_id}")
    return spin
