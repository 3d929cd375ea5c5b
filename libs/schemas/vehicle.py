from decimal import Decimal

from pydantic import BaseModel, Field


class Vehicle(BaseModel):
    """
    대여 가능한 차량 엔티티.
    차량 카탈로그 서비스가 소유하며, 대여 서비스에서는 읽기만 합니다.
    """

    vehicleId: int = Field(..., description="차량 고유 식별자")
    isAvailable: bool = Field(..., description="대여 가능 여부 (차량 카탈로그 기준)")
    pricePerDay: Decimal = Field(..., description="1일 대여 요금")

    class Config:
        from_attributes = True
