from datetime import datetime
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from fastapi_pagination import Page

from libs.common import CurrentUser

from services.rental.app.core.RentalService import (
    RentalErrorKind,
    RentalService,
    RentalStoreError,
)
from services.rental.app.db.repositories.catalog import SQLAlchemyMemberRepository
from services.rental.app.dependencies import get_member_repository, get_rental_service
from services.rental.app.schemas.request import RentalCreateSchema
from services.rental.app.schemas.response import AvailabilityResponse, RentalResponse

# 차량 대여 관련 라우터
router = APIRouter(prefix="/rentals", tags=["Rental"])

_ERROR_STATUS = {
    RentalErrorKind.INVALID_DATE_RANGE: status.HTTP_400_BAD_REQUEST,
    RentalErrorKind.VEHICLE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RentalErrorKind.VEHICLE_UNAVAILABLE: status.HTTP_409_CONFLICT,
    RentalErrorKind.INVALID_COUPON: status.HTTP_400_BAD_REQUEST,
    RentalErrorKind.COUPON_ALREADY_REDEEMED: status.HTTP_406_NOT_ACCEPTABLE,
    RentalErrorKind.RENTAL_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RentalErrorKind.STORE_FAILURE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _raise_for_error(error: RentalErrorKind) -> NoReturn:
    """대여 오류 종류를 HTTP 응답으로 변환"""
    raise HTTPException(
        status_code=_ERROR_STATUS[error],
        detail={"code": error.value, "message": error.message},
    )


async def _require_member(
    current_user: tuple[str, int],
    member_repository: SQLAlchemyMemberRepository,
) -> int:
    """개인회원만 대여 기능을 사용할 수 있음. 회원 ID를 반환합니다."""
    subject_type, subject_id = current_user

    if subject_type != "member":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="개인회원만 차량을 대여할 수 있습니다.",
        )

    try:
        exists = await member_repository.member_exists(subject_id)
    except RentalStoreError:
        _raise_for_error(RentalErrorKind.STORE_FAILURE)

    if not exists:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "ERR-NOT-MEMBER"},
        )
    return subject_id


@router.post("", response_model=RentalResponse, status_code=status.HTTP_201_CREATED)
async def create_rental(
    payload: RentalCreateSchema,
    current_user: CurrentUser,
    rental_service: RentalService = Depends(get_rental_service),
    member_repository: SQLAlchemyMemberRepository = Depends(get_member_repository),
):
    """
    차량을 대여합니다.

    **Headers:**
    - `Authorization`: Bearer {access_token} (필수)

    **Request Body:**
    - `vehicleId`: 차량 ID
    - `startDate`, `endDate`: 대여 기간 (종료 시각에 다음 대여 시작 가능)
    - `couponCode`: 쿠폰 코드 (선택, 회원당 1회)

    **Response:**
    - HTTP 201 Created: 생성된 대여 정보
    - HTTP 400 Bad Request: 기간 오류 `ERR-IVD-DATE`, 쿠폰 오류 `ERR-IVD-COUPON`
    - HTTP 404 Not Found: 차량 없음 `ERR-NOT-FOUND-VEHICLE`
    - HTTP 406 Not Acceptable: 이미 사용한 쿠폰 `ERR-ALREADY-USED`
    - HTTP 409 Conflict: 해당 기간 대여 불가 `ERR-UNAVAILABLE`
    - HTTP 503 Service Unavailable: 일시적인 저장소 오류 `ERR-INTERNAL`
    """
    member_id = await _require_member(current_user, member_repository)

    result = await rental_service.create_rental(
        vehicle_id=payload.vehicleId,
        user_id=member_id,
        start_date=payload.startDate,
        end_date=payload.endDate,
        coupon_code=payload.couponCode,
    )
    if not result.success:
        _raise_for_error(result.error)

    return RentalResponse.from_rental(result.rental)


@router.delete("/{rental_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_rental(
    rental_id: int,
    current_user: CurrentUser,
    rental_service: RentalService = Depends(get_rental_service),
    member_repository: SQLAlchemyMemberRepository = Depends(get_member_repository),
):
    """
    본인의 대여를 취소합니다.

    **Response:**
    - HTTP 204 No Content: 취소 성공
    - HTTP 404 Not Found: 대여가 없거나 본인의 대여가 아닌 경우 `ERR-NOT-FOUND-RENTAL`
    """
    member_id = await _require_member(current_user, member_repository)

    result = await rental_service.cancel_rental(rental_id=rental_id, user_id=member_id)
    if not result.success:
        _raise_for_error(result.error)

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("", response_model=Page[RentalResponse])
async def get_my_rentals(
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    size: int = Query(10, ge=1, le=100),
    rental_service: RentalService = Depends(get_rental_service),
    member_repository: SQLAlchemyMemberRepository = Depends(get_member_repository),
):
    """
    본인의 대여 목록을 조회합니다 (시작일 최신순).

    **Query Parameters:**
    - `page`: 페이지 번호 (기본값: 1)
    - `size`: 페이지 크기 (기본값: 10)
    """
    member_id = await _require_member(current_user, member_repository)

    try:
        return await rental_service.get_rentals_by_member(
            member_id=member_id,
            page=page,
            size=size,
        )
    except RentalStoreError:
        _raise_for_error(RentalErrorKind.STORE_FAILURE)


@router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(
    current_user: CurrentUser,
    vehicle_id: int = Query(..., alias="vehicleId"),
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
    rental_service: RentalService = Depends(get_rental_service),
):
    """
    차량의 기간 내 대여 가능 여부와 예상 요금(쿠폰 할인 전)을 조회합니다.
    조회 결과는 예약을 보장하지 않습니다.
    """
    result = await rental_service.check_availability(
        vehicle_id=vehicle_id,
        start_date=start_date,
        end_date=end_date,
    )
    if not result.success:
        _raise_for_error(result.error)

    return AvailabilityResponse(
        vehicleId=vehicle_id,
        startDate=start_date,
        endDate=end_date,
        available=result.available,
        pricePerDay=result.price_per_day,
        estimatedPrice=result.estimated_price,
    )
