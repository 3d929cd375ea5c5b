from decimal import Decimal

from pydantic import BaseModel, Field


class Coupon(BaseModel):
    """
    할인 쿠폰 엔티티 정의.
    """

    couponId: int = Field(..., description="쿠폰 고유 식별자")
    code: str = Field(..., description="쿠폰 코드")
    discountPercent: Decimal = Field(..., description="할인율 (0~100, 쿠폰 발급처 기준 값을 그대로 사용)")

    class Config:
        from_attributes = True
