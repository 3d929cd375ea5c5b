from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class AvailabilityResponse(BaseModel):
    """차량 대여 가능 여부 조회 응답"""
    vehicleId: int = Field(..., description="차량 ID")
    startDate: datetime = Field(..., description="조회 시작 일시")
    endDate: datetime = Field(..., description="조회 종료 일시")
    available: bool = Field(..., description="대여 가능 여부")
    pricePerDay: Decimal = Field(..., description="1일 대여 요금")
    estimatedPrice: Decimal = Field(..., description="예상 요금 (쿠폰 할인 전)")
