from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

HUNDRED = Decimal(100)
ZERO = Decimal(0)
# rentals.total_price 컬럼(Numeric(12, 2))과 같은 자릿수
PRICE_UNIT = Decimal("0.01")


def rental_days(start_date: datetime, end_date: datetime) -> int:
    """대여 일수 (하루 미만은 버림)"""
    return (end_date - start_date).days


def round_price(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(PRICE_UNIT, rounding=ROUND_HALF_UP)


def quote_price(start_date: datetime, end_date: datetime, price_per_day: Decimal) -> Decimal:
    """할인 전 대여 요금 = 대여 일수 x 1일 요금"""
    return round_price(rental_days(start_date, end_date) * Decimal(price_per_day))


def apply_discount(total_price: Decimal, discount_percent: Decimal) -> Decimal:
    """
    쿠폰 할인율(%)을 한 번 적용한 금액을 반환합니다.
    소수점 셋째 자리에서 반올림하며, 할인율이 100%를 넘어도 0원 미만이 되지 않습니다.
    """
    total_price = Decimal(total_price)
    discounted = total_price - total_price * (Decimal(discount_percent) / HUNDRED)
    return round_price(max(discounted, ZERO))
