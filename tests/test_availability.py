from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from services.rental.app.core.availability import intervals_overlap, is_vehicle_available
from services.rental.app.core.pricing import apply_discount, quote_price, rental_days

from conftest import kst


@dataclass
class Period:
    startDate: datetime
    endDate: datetime


EXISTING = [Period(kst(3, 10), kst(3, 15))]


@pytest.mark.parametrize(
    "start_day, end_day, expected",
    [
        (5, 10, True),    # 기존 대여 시작 시각에 끝남
        (15, 18, True),   # 기존 대여 종료 시각에 시작
        (16, 20, True),
        (5, 11, False),
        (14, 18, False),
        (11, 13, False),  # 기존 대여 안에 포함
        (8, 17, False),   # 기존 대여를 포함
        (10, 15, False),
    ],
)
def test_vehicle_availability_against_existing_rental(start_day, end_day, expected):
    assert is_vehicle_available(True, EXISTING, kst(3, start_day), kst(3, end_day)) is expected


def test_overlap_is_symmetric():
    a = (kst(3, 10), kst(3, 15))
    b = (kst(3, 14), kst(3, 18))
    assert intervals_overlap(*a, *b)
    assert intervals_overlap(*b, *a)
    assert not intervals_overlap(kst(3, 10), kst(3, 15), kst(3, 15), kst(3, 18))


def test_unavailable_flag_blocks_even_without_rentals():
    assert is_vehicle_available(False, [], kst(3, 1), kst(3, 2)) is False
    assert is_vehicle_available(True, [], kst(3, 1), kst(3, 2)) is True


def test_rental_days_truncates_partial_days():
    start = kst(3, 15, 10)
    assert rental_days(start, start + timedelta(days=2, hours=23)) == 2
    assert rental_days(start, start + timedelta(hours=5)) == 0


def test_quote_and_discount():
    base = quote_price(kst(3, 15), kst(3, 18), Decimal("50"))
    assert base == Decimal("150")
    assert apply_discount(base, Decimal("20")) == Decimal("120")
    assert apply_discount(base, Decimal("0")) == base
    assert apply_discount(base, Decimal("100")) == Decimal("0")


def test_discount_over_hundred_percent_is_free():
    assert apply_discount(Decimal("150"), Decimal("150")) == Decimal("0")


def test_discount_is_rounded_to_cents():
    assert apply_discount(Decimal("10"), Decimal("33.33")) == Decimal("6.67")
    assert apply_discount(Decimal("10"), Decimal("33.35")) == Decimal("6.67")
    assert apply_discount(Decimal("0.05"), Decimal("50")) == Decimal("0.03")
