from functools import lru_cache

from services.rental.app.core.RentalService import RentalService
from services.rental.app.db.repositories.catalog import (
    SQLAlchemyCouponRepository,
    SQLAlchemyMemberRepository,
    SQLAlchemyVehicleRepository,
)
from services.rental.app.db.repositories.rentals import SQLAlchemyRentalStore


@lru_cache
def _rental_store() -> SQLAlchemyRentalStore:
    return SQLAlchemyRentalStore()


@lru_cache
def _vehicle_repository() -> SQLAlchemyVehicleRepository:
    return SQLAlchemyVehicleRepository()


@lru_cache
def _coupon_repository() -> SQLAlchemyCouponRepository:
    return SQLAlchemyCouponRepository()


@lru_cache
def get_member_repository() -> SQLAlchemyMemberRepository:
    """회원 Repository 의존성"""
    return SQLAlchemyMemberRepository()


@lru_cache
def get_rental_service() -> RentalService:
    """대여 서비스 의존성"""
    return RentalService(
        rental_store=_rental_store(),
        vehicle_repository=_vehicle_repository(),
        coupon_repository=_coupon_repository(),
    )
