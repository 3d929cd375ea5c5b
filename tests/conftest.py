import os

# 서비스 모듈 import 시 MySQL 드라이버 없이 엔진을 만들 수 있도록 설정
os.environ.setdefault("RENTAL_DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("JWT_ALGORITHM", "HS256")

from datetime import datetime
from decimal import Decimal

import jwt
import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from libs.common import KST_TIMEZONE
from services.rental.app.core.RentalService import RentalService
from services.rental.app.db.repositories.catalog import (
    SQLAlchemyCouponRepository,
    SQLAlchemyMemberRepository,
    SQLAlchemyVehicleRepository,
)
from services.rental.app.db.repositories.rentals import SQLAlchemyRentalStore
from services.rental.app.db.session import build_engine
from services.rental.app.db.tables import coupons, members, metadata, vehicles

NOW = datetime(2026, 3, 1, 9, 0, tzinfo=KST_TIMEZONE)


def kst(month: int, day: int, hour: int = 0) -> datetime:
    return datetime(2026, month, day, hour, tzinfo=KST_TIMEZONE)


def make_token(subject_id: int, subject_type: str = "member") -> str:
    return jwt.encode(
        {"sub_type": subject_type, "sub_id": str(subject_id)},
        os.environ["JWT_SECRET_KEY"],
        algorithm=os.environ["JWT_ALGORITHM"],
    )


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'rental.db'}", lock_timeout=30)
    metadata.create_all(engine)
    with engine.begin() as conn:
        conn.execute(
            members.insert(),
            [
                {"member_id": 1, "member_name": "홍길동"},
                {"member_id": 2, "member_name": "김철수"},
                {"member_id": 3, "member_name": "이영희"},
            ],
        )
        conn.execute(
            vehicles.insert(),
            [
                {"vehicle_id": 1, "is_available": True, "price_per_day": Decimal("50")},
                {"vehicle_id": 2, "is_available": False, "price_per_day": Decimal("40")},
                {"vehicle_id": 3, "is_available": True, "price_per_day": Decimal("80")},
            ],
        )
        conn.execute(
            coupons.insert(),
            [
                {"coupon_id": 1, "code": "SPRING20", "discount_percent": Decimal("20")},
                {"coupon_id": 2, "code": "HALF", "discount_percent": Decimal("50")},
            ],
        )
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def rental_store(session_factory):
    return SQLAlchemyRentalStore(session_factory)


@pytest.fixture
def vehicle_repository(session_factory):
    return SQLAlchemyVehicleRepository(session_factory)


@pytest.fixture
def coupon_repository(session_factory):
    return SQLAlchemyCouponRepository(session_factory)


@pytest.fixture
def member_repository(session_factory):
    return SQLAlchemyMemberRepository(session_factory)


@pytest.fixture
def rental_service(rental_store, vehicle_repository, coupon_repository):
    return RentalService(
        rental_store=rental_store,
        vehicle_repository=vehicle_repository,
        coupon_repository=coupon_repository,
        clock=lambda: NOW,
    )


@pytest.fixture
def count_rows(engine):
    def _count(table, **filters):
        query = select(func.count()).select_from(table)
        for name, value in filters.items():
            query = query.where(table.c[name] == value)
        with engine.connect() as conn:
            return conn.execute(query).scalar()

    return _count
