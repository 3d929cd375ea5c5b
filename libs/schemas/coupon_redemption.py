from pydantic import BaseModel, Field


class CouponRedemption(BaseModel):
    """
    쿠폰 사용 이력 엔티티.
    한 회원은 같은 쿠폰을 한 번만 사용할 수 있습니다.
    """

    redemptionId: int = Field(..., description="사용 이력 식별자")
    rentalId: int = Field(..., description="쿠폰이 적용된 대여 ID")
    couponId: int = Field(..., description="사용한 쿠폰 ID")
    userId: int = Field(..., description="쿠폰을 사용한 회원 ID")

    class Config:
        from_attributes = True
