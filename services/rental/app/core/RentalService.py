"""
차량 대여 예약 관련 비즈니스 로직을 처리하는 서비스
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Callable, Protocol, TypeVar

from fastapi_pagination import Page

from libs.common import ensure_kst, now_kst
from libs.schemas import Coupon, CouponRedemption, Rental, Vehicle

from services.rental.app.core.availability import is_vehicle_available
from services.rental.app.core.pricing import apply_discount, quote_price
from services.rental.app.schemas.response import RentalResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RentalErrorKind(str, Enum):
    INVALID_DATE_RANGE = "ERR-IVD-DATE"
    VEHICLE_NOT_FOUND = "ERR-NOT-FOUND-VEHICLE"
    VEHICLE_UNAVAILABLE = "ERR-UNAVAILABLE"
    INVALID_COUPON = "ERR-IVD-COUPON"
    COUPON_ALREADY_REDEEMED = "ERR-ALREADY-USED"
    RENTAL_NOT_FOUND = "ERR-NOT-FOUND-RENTAL"
    STORE_FAILURE = "ERR-INTERNAL"

    @property
    def message(self) -> str:
        return _ERROR_MESSAGES[self]


_ERROR_MESSAGES = {
    RentalErrorKind.INVALID_DATE_RANGE: "대여 시작일은 현재 이후여야 하며 종료일보다 빨라야 합니다.",
    RentalErrorKind.VEHICLE_NOT_FOUND: "차량을 찾을 수 없습니다.",
    RentalErrorKind.VEHICLE_UNAVAILABLE: "해당 기간에는 차량을 대여할 수 없습니다.",
    RentalErrorKind.INVALID_COUPON: "유효하지 않은 쿠폰 코드입니다.",
    RentalErrorKind.COUPON_ALREADY_REDEEMED: "이미 사용한 쿠폰입니다.",
    RentalErrorKind.RENTAL_NOT_FOUND: "대여 내역을 찾을 수 없습니다.",
    RentalErrorKind.STORE_FAILURE: "일시적인 오류로 요청을 처리하지 못했습니다. 잠시 후 다시 시도해주세요.",
}


class RentalStoreError(Exception):
    """대여 저장소(DB) 접근 실패"""


class CouponRedemptionConflict(Exception):
    """같은 회원의 쿠폰 사용 이력이 이미 저장되어 있는 경우"""

    def __init__(self, coupon_id: int, user_id: int):
        super().__init__(f"coupon {coupon_id} already redeemed by user {user_id}")
        self.coupon_id = coupon_id
        self.user_id = user_id


@dataclass(frozen=True)
class RentalResult:
    rental: Rental | None = None
    error: RentalErrorKind | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error else None

    @classmethod
    def ok(cls, rental: Rental) -> "RentalResult":
        return cls(rental=rental)

    @classmethod
    def fail(cls, error: RentalErrorKind) -> "RentalResult":
        return cls(error=error)


@dataclass(frozen=True)
class AvailabilityResult:
    available: bool = False
    price_per_day: Decimal | None = None
    estimated_price: Decimal | None = None
    error: RentalErrorKind | None = None

    @property
    def success(self) -> bool:
        return self.error is None


class MemberRepositoryPort(Protocol):
    async def member_exists(self, member_id: int) -> bool: ...


class VehicleRepositoryPort(Protocol):
    async def get_vehicle_by_id(self, vehicle_id: int) -> Vehicle | None: ...


class CouponRepositoryPort(Protocol):
    async def get_coupon_by_code(self, code: str) -> Coupon | None: ...

    async def has_user_redeemed(self, code: str, user_id: int) -> bool: ...


class RentalTransaction(Protocol):
    """
    요청 하나에 대응하는 DB 트랜잭션.
    commit()을 호출하지 않고 끝나면 모든 변경은 롤백됩니다.
    """

    def lock_vehicle(self, vehicle_id: int) -> None: ...

    def find_overlapping_rentals(
        self, vehicle_id: int, start_date: datetime, end_date: datetime
    ) -> list[Rental]: ...

    def add_rental(
        self,
        vehicle_id: int,
        user_id: int,
        start_date: datetime,
        end_date: datetime,
        total_price: Decimal,
    ) -> Rental: ...

    def add_redemption(self, rental_id: int, coupon_id: int, user_id: int) -> CouponRedemption: ...

    def find_rental_for_owner(self, rental_id: int, user_id: int) -> Rental | None: ...

    def delete_rental(self, rental_id: int) -> None: ...

    def commit(self) -> None: ...


class RentalStorePort(Protocol):
    async def run_in_transaction(self, work: Callable[[RentalTransaction], T]) -> T: ...

    async def find_overlapping_rentals(
        self, vehicle_id: int, start_date: datetime, end_date: datetime
    ) -> list[Rental]: ...

    async def find_rentals_by_member(
        self, member_id: int, page: int, size: int
    ) -> tuple[list[Rental], int]: ...


class RentalService:
    """차량 대여 서비스"""

    def __init__(
        self,
        rental_store: RentalStorePort,
        vehicle_repository: VehicleRepositoryPort,
        coupon_repository: CouponRepositoryPort,
        clock: Callable[[], datetime] = now_kst,
    ):
        self.rental_store = rental_store
        self.vehicle_repository = vehicle_repository
        self.coupon_repository = coupon_repository
        self.clock = clock

    async def create_rental(
        self,
        vehicle_id: int,
        user_id: int,
        start_date: datetime,
        end_date: datetime,
        coupon_code: str | None = None,
    ) -> RentalResult:
        """
        차량 대여를 생성합니다.

        검증 순서: 기간 → 차량 존재 → 대여 가능 여부 → 쿠폰 → 저장.
        첫 번째로 실패한 검증의 오류를 반환하며, 실패 시 어떤 데이터도 저장되지 않습니다.

        Args:
            vehicle_id: 차량 ID
            user_id: 대여 회원 ID
            start_date: 대여 시작 일시
            end_date: 대여 종료 일시
            coupon_code: 쿠폰 코드 (선택)

        Returns:
            생성된 대여 또는 오류 종류를 담은 RentalResult
        """
        start_date = ensure_kst(start_date)
        end_date = ensure_kst(end_date)

        if not self._is_valid_period(start_date, end_date):
            return self._reject(RentalErrorKind.INVALID_DATE_RANGE, vehicle_id, user_id)

        try:
            vehicle = await self.vehicle_repository.get_vehicle_by_id(vehicle_id)
            if vehicle is None:
                return self._reject(RentalErrorKind.VEHICLE_NOT_FOUND, vehicle_id, user_id)

            # 쿠폰 조회는 트랜잭션 밖에서 먼저 하되, 오류 판정은 대여 가능 여부 이후에 한다
            coupon = None
            already_redeemed = False
            if coupon_code:
                coupon = await self.coupon_repository.get_coupon_by_code(coupon_code)
                if coupon is not None:
                    already_redeemed = await self.coupon_repository.has_user_redeemed(
                        coupon_code, user_id
                    )

            def _book(tx: RentalTransaction) -> RentalResult:
                # 차량 잠금 이후의 조회/저장은 같은 차량의 다른 예약과 직렬화됨
                tx.lock_vehicle(vehicle.vehicleId)

                existing = tx.find_overlapping_rentals(vehicle.vehicleId, start_date, end_date)
                if not is_vehicle_available(vehicle.isAvailable, existing, start_date, end_date):
                    return RentalResult.fail(RentalErrorKind.VEHICLE_UNAVAILABLE)

                total_price = quote_price(start_date, end_date, vehicle.pricePerDay)

                if coupon_code:
                    if coupon is None:
                        return RentalResult.fail(RentalErrorKind.INVALID_COUPON)
                    if already_redeemed:
                        return RentalResult.fail(RentalErrorKind.COUPON_ALREADY_REDEEMED)
                    total_price = apply_discount(total_price, coupon.discountPercent)

                rental = tx.add_rental(
                    vehicle_id=vehicle.vehicleId,
                    user_id=user_id,
                    start_date=start_date,
                    end_date=end_date,
                    total_price=total_price,
                )
                if coupon is not None:
                    tx.add_redemption(
                        rental_id=rental.rentalId,
                        coupon_id=coupon.couponId,
                        user_id=user_id,
                    )

                tx.commit()
                return RentalResult.ok(rental)

            result = await self.rental_store.run_in_transaction(_book)
        except CouponRedemptionConflict:
            return self._reject(RentalErrorKind.COUPON_ALREADY_REDEEMED, vehicle_id, user_id)
        except RentalStoreError:
            logger.exception(
                "대여 저장 실패 - vehicle_id=%s, user_id=%s", vehicle_id, user_id
            )
            return RentalResult.fail(RentalErrorKind.STORE_FAILURE)

        if not result.success:
            return self._reject(result.error, vehicle_id, user_id)

        logger.info(
            "대여 생성 - rental_id=%s, vehicle_id=%s, user_id=%s, total_price=%s",
            result.rental.rentalId,
            vehicle_id,
            user_id,
            result.rental.totalPrice,
        )
        return result

    async def cancel_rental(self, rental_id: int, user_id: int) -> RentalResult:
        """
        본인의 대여를 취소(삭제)합니다.

        다른 회원의 대여인 경우와 존재하지 않는 경우를 구분하지 않고
        모두 RENTAL_NOT_FOUND를 반환합니다.
        쿠폰 사용 이력도 함께 삭제되어 해당 쿠폰을 다시 사용할 수 있습니다.
        """

        def _cancel(tx: RentalTransaction) -> RentalResult:
            rental = tx.find_rental_for_owner(rental_id, user_id)
            if rental is None:
                return RentalResult.fail(RentalErrorKind.RENTAL_NOT_FOUND)

            tx.delete_rental(rental.rentalId)
            tx.commit()
            return RentalResult.ok(rental)

        try:
            result = await self.rental_store.run_in_transaction(_cancel)
        except RentalStoreError:
            logger.exception("대여 취소 실패 - rental_id=%s, user_id=%s", rental_id, user_id)
            return RentalResult.fail(RentalErrorKind.STORE_FAILURE)

        if result.success:
            logger.info("대여 취소 - rental_id=%s, user_id=%s", rental_id, user_id)
        return result

    async def check_availability(
        self,
        vehicle_id: int,
        start_date: datetime,
        end_date: datetime,
    ) -> AvailabilityResult:
        """
        차량의 기간 내 대여 가능 여부와 예상 요금(할인 전)을 조회합니다.
        잠금 없이 조회하므로 실제 예약 시 결과가 달라질 수 있습니다.
        """
        start_date = ensure_kst(start_date)
        end_date = ensure_kst(end_date)

        if not self._is_valid_period(start_date, end_date):
            return AvailabilityResult(error=RentalErrorKind.INVALID_DATE_RANGE)

        try:
            vehicle = await self.vehicle_repository.get_vehicle_by_id(vehicle_id)
            if vehicle is None:
                return AvailabilityResult(error=RentalErrorKind.VEHICLE_NOT_FOUND)

            existing = await self.rental_store.find_overlapping_rentals(
                vehicle_id, start_date, end_date
            )
        except RentalStoreError:
            logger.exception("대여 가능 여부 조회 실패 - vehicle_id=%s", vehicle_id)
            return AvailabilityResult(error=RentalErrorKind.STORE_FAILURE)

        return AvailabilityResult(
            available=is_vehicle_available(vehicle.isAvailable, existing, start_date, end_date),
            price_per_day=vehicle.pricePerDay,
            estimated_price=quote_price(start_date, end_date, vehicle.pricePerDay),
        )

    async def get_rentals_by_member(
        self,
        member_id: int,
        page: int,
        size: int,
    ) -> Page[RentalResponse]:
        """
        회원의 대여 목록을 조회합니다.

        Args:
            member_id: 회원 ID
            page: 페이지 번호 (1부터 시작)
            size: 페이지 크기

        Returns:
            페이징된 대여 목록

        Raises:
            RentalStoreError: DB 조회에 실패한 경우
        """
        rentals, total = await self.rental_store.find_rentals_by_member(
            member_id=member_id,
            page=page,
            size=size,
        )

        items = [RentalResponse.from_rental(rental) for rental in rentals]

        return Page(
            items=items,
            total=total,
            page=page,
            size=size,
            pages=(total + size - 1) // size if size > 0 else 0,
        )

    def _is_valid_period(self, start_date: datetime, end_date: datetime) -> bool:
        return start_date >= self.clock() and start_date < end_date

    @staticmethod
    def _reject(error: RentalErrorKind, vehicle_id: int, user_id: int) -> RentalResult:
        logger.info(
            "대여 거절 - vehicle_id=%s, user_id=%s, code=%s", vehicle_id, user_id, error.value
        )
        return RentalResult.fail(error)
