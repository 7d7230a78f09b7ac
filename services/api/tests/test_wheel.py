"""Tests for wheel of fortune configuration and eligibility."""

from datetime import date

import pytest

from storefront.services import wheel as wheel_module
from storefront.services.cms_client import CmsError
from storefront.services.wheel import check_eligibility, compute_winning_index, get_wheel_configuration


def test_winning_index_uses_zero_based_month():
    # 15*31 + 2*12 + 2026 = 2515
    assert compute_winning_index(date(2026, 3, 15), 7) == 2515 % 7


def test_winning_index_empty_wheel():
    assert compute_winning_index(date(2026, 3, 15), 0) is None


def test_winning_index_is_stable_within_a_day():
    today = date(2026, 10, 18)
    assert compute_winning_index(today, 7) == compute_winning_index(today, 7)


@pytest.mark.asyncio
async def test_configuration_from_cms(make_cms):
    products = [{"_id": f"p{i}"} for i in range(7)]
    cms = make_cms(query_results={'_type == "product"': products})

    config = await get_wheel_configuration(cms=cms, today=date(2026, 3, 15))

    assert config["randomProducts"] == products
    assert config["winningIndex"] == 2515 % 7


@pytest.mark.asyncio
async def test_eligibility_requires_sign_in(fake_cms):
    result = await check_eligibility(object(), None, cms=fake_cms)
    assert not result.is_eligible
    assert result.remaining_amount == 300.0


@pytest.mark.asyncio
async def test_eligible_when_completed_orders_reach_minimum(make_cms, monkeypatch: pytest.MonkeyPatch):
    cms = make_cms(query_results={'status == "COMPLETED"': [{"totalPrice": 200}, {"totalPrice": 150.5}]})

    async def no_spins(session, user_id):
        return []

    monkeypatch.setattr(wheel_module, "find_user_spins_today", no_spins)

    result = await check_eligibility(object(), 7, cms=cms)

    assert result.is_eligible
    assert result.total_spent == 350.5
    assert result.remaining_amount == 0.0
    assert cms.queries[0][1] == {"userId": "7"}


@pytest.mark.asyncio
async def test_not_eligible_below_minimum(make_cms, monkeypatch: pytest.MonkeyPatch):
    cms = make_cms(query_results={'status == "COMPLETED"': [{"totalPrice": 100}]})

    async def no_spins(session, user_id):
        return []

    monkeypatch.setattr(wheel_module, "find_user_spins_today", no_spins)

    result = await check_eligibility(object(), 7, cms=cms)

    assert not result.is_eligible
    assert result.remaining_amount == 200.0
    assert "200.00" in result.reason


@pytest.mark.asyncio
async def test_not_eligible_after_spinning_today(make_cms, monkeypatch: pytest.MonkeyPatch):
    cms = make_cms(query_results={'status == "COMPLETED"': [{"totalPrice": 500}]})

    async def one_spin(session, user_id):
        return [object()]

    monkeypatch.setattr(wheel_module, "find_user_spins_today", one_spin)

    result = await check_eligibility(object(), 7, cms=cms)

    assert not result.is_eligible
    assert result.has_spun_today
    assert result.to_dict()["hasSpunToday"] is True


@pytest.mark.asyncio
async def test_cms_failure_gives_unable_to_check(make_cms):
    cms = make_cms(query_results={'status == "COMPLETED"': CmsError("down")})

    result = await check_eligibility(object(), 7, cms=cms)

    assert not result.is_eligible
    assert result.reason == "Unable to check eligibility at this time"
