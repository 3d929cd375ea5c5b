from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class Rental(BaseModel):
    """
    차량 대여(예약) 엔티티.
    대여 기간은 [startDate, endDate) 반개구간으로 취급합니다.
    """

    rentalId: int = Field(..., description="대여 고유 식별자")
    vehicleId: int = Field(..., description="대여 차량 ID")
    rentedBy: int = Field(..., description="대여 회원 ID")
    startDate: datetime = Field(..., description="대여 시작 일시")
    endDate: datetime = Field(..., description="대여 종료 일시 (해당 시각부터 다른 대여 가능)")
    totalPrice: Decimal = Field(..., ge=0, description="최종 결제 금액 (쿠폰 할인 반영)")

    class Config:
        from_attributes = True
