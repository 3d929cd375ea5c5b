from datetime import datetime

from pydantic import BaseModel, Field


class RentalCreateSchema(BaseModel):
    """
    차량 대여 요청 본문.
    시간대가 없는 일시는 KST로 간주합니다.
    """

    vehicleId: int = Field(..., description="대여할 차량 ID")
    startDate: datetime = Field(..., description="대여 시작 일시")
    endDate: datetime = Field(..., description="대여 종료 일시")
    couponCode: str | None = Field(None, description="쿠폰 코드 (선택)")
