"""
같은 차량/같은 쿠폰에 대한 동시 예약 요청 테스트
"""
import asyncio
from datetime import timedelta
from decimal import Decimal

from services.rental.app.core.RentalService import RentalErrorKind
from services.rental.app.db.tables import coupon_redemptions, rentals, vehicles

from conftest import kst

N_REQUESTS = 8


async def test_concurrent_overlapping_requests_yield_one_booking(rental_service, count_rows):
    # 모든 요청 기간이 서로 겹침 (시작 시각만 1시간씩 다름)
    requests = [
        rental_service.create_rental(
            1,
            1 + i % 3,
            kst(3, 10) + timedelta(hours=i),
            kst(3, 15) + timedelta(hours=i),
        )
        for i in range(N_REQUESTS)
    ]

    results = await asyncio.gather(*requests)

    successes = [result for result in results if result.success]
    assert len(successes) == 1
    assert [result.error for result in results if not result.success] == [
        RentalErrorKind.VEHICLE_UNAVAILABLE
    ] * (N_REQUESTS - 1)
    assert count_rows(rentals, vehicle_id=1) == 1


async def test_concurrent_redemptions_of_same_coupon(engine, rental_service, count_rows):
    with engine.begin() as conn:
        conn.execute(
            vehicles.insert(),
            [
                {"vehicle_id": 100 + i, "is_available": True, "price_per_day": Decimal("10")}
                for i in range(N_REQUESTS)
            ],
        )

    # 같은 회원이 서로 다른 차량에 같은 쿠폰으로 동시에 예약
    results = await asyncio.gather(
        *[
            rental_service.create_rental(100 + i, 1, kst(3, 10), kst(3, 12), "SPRING20")
            for i in range(N_REQUESTS)
        ]
    )

    assert sum(result.success for result in results) == 1
    assert all(
        result.error is RentalErrorKind.COUPON_ALREADY_REDEEMED
        for result in results
        if not result.success
    )
    assert count_rows(coupon_redemptions, user_id=1) == 1
    assert count_rows(rentals, rented_by=1) == 1
