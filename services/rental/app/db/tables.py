"""
대여 서비스가 사용하는 테이블 정의

vehicles, coupons, members는 다른 서비스가 관리하는 테이블이며
여기서는 조회용 컬럼만 정의합니다.
"""
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    UniqueConstraint,
)

metadata = MetaData()

members = Table(
    "members",
    metadata,
    Column("member_id", Integer, primary_key=True, autoincrement=True),
    Column("member_name", String(50), nullable=False),
)

vehicles = Table(
    "vehicles",
    metadata,
    Column("vehicle_id", Integer, primary_key=True, autoincrement=True),
    Column("is_available", Boolean, nullable=False, default=True),
    Column("price_per_day", Numeric(12, 2), nullable=False),
)

coupons = Table(
    "coupons",
    metadata,
    Column("coupon_id", Integer, primary_key=True, autoincrement=True),
    Column("code", String(64), nullable=False, unique=True),
    Column("discount_percent", Numeric(5, 2), nullable=False),
)

rentals = Table(
    "rentals",
    metadata,
    Column("rental_id", Integer, primary_key=True, autoincrement=True),
    Column("vehicle_id", Integer, ForeignKey("vehicles.vehicle_id"), nullable=False),
    Column("rented_by", Integer, ForeignKey("members.member_id"), nullable=False),
    Column("start_date", DateTime, nullable=False),
    Column("end_date", DateTime, nullable=False),
    Column("total_price", Numeric(12, 2), nullable=False),
    Column("created_at", DateTime, nullable=False),
    Index("ix_rentals_vehicle_period", "vehicle_id", "start_date", "end_date"),
    Index("ix_rentals_rented_by", "rented_by"),
)

coupon_redemptions = Table(
    "coupon_redemptions",
    metadata,
    Column("redemption_id", Integer, primary_key=True, autoincrement=True),
    Column(
        "rental_id",
        Integer,
        ForeignKey("rentals.rental_id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("coupon_id", Integer, ForeignKey("coupons.coupon_id"), nullable=False),
    Column("user_id", Integer, ForeignKey("members.member_id"), nullable=False),
    Column("redeemed_at", DateTime, nullable=False),
    # 같은 회원이 같은 쿠폰을 두 번 사용할 수 없음
    UniqueConstraint("coupon_id", "user_id", name="uq_coupon_redemptions_coupon_user"),
)

# 차량별 예약을 직렬화하기 위한 잠금 행 (차량 1대당 1행)
vehicle_booking_locks = Table(
    "vehicle_booking_locks",
    metadata,
    Column("vehicle_id", Integer, primary_key=True, autoincrement=False),
    Column("locked_at", DateTime, nullable=False),
)
