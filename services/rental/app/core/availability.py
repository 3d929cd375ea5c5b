"""
차량 대여 기간 충돌 판정

대여 기간은 [시작, 종료) 반개구간입니다. 한 대여가 끝나는 시각에
다음 대여가 시작하는 경우(경계가 맞닿는 경우)는 충돌이 아닙니다.
"""
from datetime import datetime
from typing import Iterable, Protocol


class RentalPeriod(Protocol):
    startDate: datetime
    endDate: datetime


def intervals_overlap(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    """두 기간 [a_start, a_end), [b_start, b_end)가 겹치는지 확인합니다."""
    return a_start < b_end and a_end > b_start


def is_vehicle_available(
    is_available: bool,
    existing_rentals: Iterable[RentalPeriod],
    start_date: datetime,
    end_date: datetime,
) -> bool:
    """
    차량을 요청 기간 동안 대여할 수 있는지 판정합니다.

    Args:
        is_available: 차량 카탈로그의 대여 가능 여부
        existing_rentals: 같은 차량의 기존 대여 목록
        start_date: 요청 시작 일시
        end_date: 요청 종료 일시

    Returns:
        대여 가능하면 True
    """
    if not is_available:
        return False

    return not any(
        intervals_overlap(rental.startDate, rental.endDate, start_date, end_date)
        for rental in existing_rentals
    )
