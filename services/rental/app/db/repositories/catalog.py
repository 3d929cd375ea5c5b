"""
다른 서비스가 관리하는 회원/차량/쿠폰 정보를 조회하는 Repository 구현
"""
from sqlalchemy import Boolean, Integer, Numeric, String, text

from libs.schemas import Coupon, Vehicle

from services.rental.app.db.repositories.base import _SQLRepositoryBase


class SQLAlchemyMemberRepository(_SQLRepositoryBase):
    async def member_exists(self, member_id: int) -> bool:
        """members 테이블에 해당 회원이 있는지 확인"""
        def _query():
            with self._session_factory() as session:
                result = session.execute(
                    text(
                        """
                        SELECT EXISTS(
                            SELECT 1
                            FROM members
                            WHERE member_id = :member_id
                        ) as exists_flag
                        """
                    ),
                    {"member_id": member_id},
                ).scalar()
                return bool(result)

        return await self._run_in_thread(_query)


class SQLAlchemyVehicleRepository(_SQLRepositoryBase):
    async def get_vehicle_by_id(self, vehicle_id: int) -> Vehicle | None:
        def _query():
            with self._session_factory() as session:
                row = (
                    session.execute(
                        text(
                            """
                            SELECT
                                vehicle_id,
                                is_available,
                                price_per_day
                            FROM vehicles
                            WHERE vehicle_id = :vehicle_id
                            LIMIT 1
                            """
                        ).columns(
                            vehicle_id=Integer,
                            is_available=Boolean,
                            price_per_day=Numeric(12, 2),
                        ),
                        {"vehicle_id": vehicle_id},
                    )
                    .mappings()
                    .first()
                )
                if row is None:
                    return None
                return Vehicle(
                    vehicleId=row["vehicle_id"],
                    isAvailable=bool(row["is_available"]),
                    pricePerDay=row["price_per_day"],
                )

        return await self._run_in_thread(_query)


class SQLAlchemyCouponRepository(_SQLRepositoryBase):
    async def get_coupon_by_code(self, code: str) -> Coupon | None:
        def _query():
            with self._session_factory() as session:
                row = (
                    session.execute(
                        text(
                            """
                            SELECT
                                coupon_id,
                                code,
                                discount_percent
                            FROM coupons
                            WHERE code = :code
                            LIMIT 1
                            """
                        ).columns(
                            coupon_id=Integer,
                            code=String,
                            discount_percent=Numeric(5, 2),
                        ),
                        {"code": code},
                    )
                    .mappings()
                    .first()
                )
                if row is None:
                    return None
                return Coupon(
                    couponId=row["coupon_id"],
                    code=row["code"],
                    discountPercent=row["discount_percent"],
                )

        return await self._run_in_thread(_query)

    async def has_user_redeemed(self, code: str, user_id: int) -> bool:
        """회원이 해당 코드의 쿠폰을 이미 사용했는지 확인"""
        def _query():
            with self._session_factory() as session:
                result = session.execute(
                    text(
                        """
                        SELECT EXISTS(
                            SELECT 1
                            FROM coupon_redemptions cr
                            INNER JOIN coupons c ON c.coupon_id = cr.coupon_id
                            WHERE c.code = :code
                              AND cr.user_id = :user_id
                        ) as exists_flag
                        """
                    ),
                    {"code": code, "user_id": user_id},
                ).scalar()
                return bool(result)

        return await self._run_in_thread(_query)
