from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from libs.schemas import Rental


class RentalResponse(BaseModel):
    """
    대여 정보 응답.
    대여 생성 성공 시 HTTP 201 Created와 함께 반환되며, 목록 조회 항목으로도 사용됩니다.
    """

    rentalId: int = Field(..., description="대여 고유 식별자")
    vehicleId: int = Field(..., description="차량 ID")
    rentedBy: int = Field(..., description="대여 회원 ID")
    startDate: datetime = Field(..., description="대여 시작 일시 (KST)")
    endDate: datetime = Field(..., description="대여 종료 일시 (KST)")
    totalPrice: Decimal = Field(..., description="최종 결제 금액")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "rentalId": 1,
                "vehicleId": 3,
                "rentedBy": 7,
                "startDate": "2026-03-15T10:00:00+09:00",
                "endDate": "2026-03-18T10:00:00+09:00",
                "totalPrice": "120.00",
            }
        },
    )

    @classmethod
    def from_rental(cls, rental: Rental) -> "RentalResponse":
        return cls(
            rentalId=rental.rentalId,
            vehicleId=rental.vehicleId,
            rentedBy=rental.rentedBy,
            startDate=rental.startDate,
            endDate=rental.endDate,
            totalPrice=rental.totalPrice,
        )
