"""
대여/쿠폰 사용 이력 저장소 구현
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, TypeVar

from sqlalchemy import DateTime, Integer, Numeric, bindparam, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from libs.common import ensure_kst, now_kst, to_db_kst
from libs.schemas import CouponRedemption, Rental

from services.rental.app.core.RentalService import CouponRedemptionConflict
from services.rental.app.db.repositories.base import _SQLRepositoryBase

logger = logging.getLogger(__name__)

T = TypeVar("T")

_RENTAL_COLUMNS = {
    "rental_id": Integer,
    "vehicle_id": Integer,
    "rented_by": Integer,
    "start_date": DateTime,
    "end_date": DateTime,
    "total_price": Numeric(12, 2),
}

_SELECT_RENTAL = """
    SELECT
        rental_id,
        vehicle_id,
        rented_by,
        start_date,
        end_date,
        total_price
    FROM rentals
"""

# SQLite에서는 DATETIME이 문자열로 저장되므로 비교 파라미터도 같은 형식으로 바인딩
_OVERLAP_QUERY = (
    text(
        _SELECT_RENTAL
        + """
    WHERE vehicle_id = :vehicle_id
      AND start_date < :end_date
      AND end_date > :start_date
    ORDER BY start_date
    """
    )
    .bindparams(
        bindparam("start_date", type_=DateTime),
        bindparam("end_date", type_=DateTime),
    )
    .columns(**_RENTAL_COLUMNS)
)

# 차량별 잠금 행을 upsert하여 트랜잭션 종료 시까지 행 잠금을 유지
_LOCK_VEHICLE_QUERIES = {
    "mysql": """
        INSERT INTO vehicle_booking_locks (vehicle_id, locked_at)
        VALUES (:vehicle_id, :locked_at)
        ON DUPLICATE KEY UPDATE
            locked_at = VALUES(locked_at)
    """,
    "default": """
        INSERT INTO vehicle_booking_locks (vehicle_id, locked_at)
        VALUES (:vehicle_id, :locked_at)
        ON CONFLICT (vehicle_id) DO UPDATE SET
            locked_at = excluded.locked_at
    """,
}

_INSERT_RENTAL = """
    INSERT INTO rentals (
        vehicle_id,
        rented_by,
        start_date,
        end_date,
        total_price,
        created_at
    ) VALUES (
        :vehicle_id,
        :rented_by,
        :start_date,
        :end_date,
        :total_price,
        :created_at
    )
"""

_INSERT_REDEMPTION = """
    INSERT INTO coupon_redemptions (rental_id, coupon_id, user_id, redeemed_at)
    VALUES (:rental_id, :coupon_id, :user_id, :redeemed_at)
"""


def _to_rental(row) -> Rental:
    return Rental(
        rentalId=row["rental_id"],
        vehicleId=row["vehicle_id"],
        rentedBy=row["rented_by"],
        startDate=ensure_kst(row["start_date"]),
        endDate=ensure_kst(row["end_date"]),
        totalPrice=row["total_price"],
    )


def _find_overlapping(session: Session, vehicle_id: int, start_date: datetime, end_date: datetime) -> list[Rental]:
    rows = (
        session.execute(
            _OVERLAP_QUERY,
            {
                "vehicle_id": vehicle_id,
                "start_date": to_db_kst(start_date),
                "end_date": to_db_kst(end_date),
            },
        )
        .mappings()
        .all()
    )
    return [_to_rental(row) for row in rows]


def _supports_returning(session: Session) -> bool:
    return session.get_bind().dialect.insert_returning


def _with_returning(session: Session, statement: str, id_column: str) -> str:
    """INSERT ... RETURNING을 지원하는 DB(PostgreSQL, SQLite 3.35+)에서는 생성된 ID를 바로 반환받음"""
    if _supports_returning(session):
        return f"{statement.rstrip()}\n    RETURNING {id_column}"
    return statement


def _inserted_id(session: Session, result) -> int:
    if _supports_returning(session):
        return result.scalar_one()
    return result.lastrowid


# 제약 조건 이름은 MySQL/PostgreSQL 오류 메시지에, 컬럼 목록은 SQLite 오류 메시지에 포함됨
_REDEMPTION_CONFLICT_MARKERS = (
    "uq_coupon_redemptions_coupon_user",
    "UNIQUE constraint failed: coupon_redemptions.coupon_id, coupon_redemptions.user_id",
)


def _is_redemption_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return any(marker in message for marker in _REDEMPTION_CONFLICT_MARKERS)


class SQLRentalTransaction:
    """
    요청 하나의 대여 트랜잭션.
    하나의 Session을 감싸며, commit()이 호출되지 않으면 종료 시 롤백됩니다.
    """

    def __init__(self, session: Session):
        self._session = session
        self.committed = False

    def lock_vehicle(self, vehicle_id: int) -> None:
        dialect = self._session.get_bind().dialect.name
        query = _LOCK_VEHICLE_QUERIES.get(dialect, _LOCK_VEHICLE_QUERIES["default"])
        self._session.execute(
            text(query).bindparams(bindparam("locked_at", type_=DateTime)),
            {"vehicle_id": vehicle_id, "locked_at": to_db_kst(now_kst())},
        )

    def find_overlapping_rentals(
        self, vehicle_id: int, start_date: datetime, end_date: datetime
    ) -> list[Rental]:
        return _find_overlapping(self._session, vehicle_id, start_date, end_date)

    def add_rental(
        self,
        vehicle_id: int,
        user_id: int,
        start_date: datetime,
        end_date: datetime,
        total_price: Decimal,
    ) -> Rental:
        result = self._session.execute(
            text(_with_returning(self._session, _INSERT_RENTAL, "rental_id")).bindparams(
                bindparam("start_date", type_=DateTime),
                bindparam("end_date", type_=DateTime),
                bindparam("created_at", type_=DateTime),
                bindparam("total_price", type_=Numeric(12, 2)),
            ),
            {
                "vehicle_id": vehicle_id,
                "rented_by": user_id,
                "start_date": to_db_kst(start_date),
                "end_date": to_db_kst(end_date),
                "total_price": total_price,
                "created_at": to_db_kst(now_kst()),
            },
        )
        return Rental(
            rentalId=_inserted_id(self._session, result),
            vehicleId=vehicle_id,
            rentedBy=user_id,
            startDate=ensure_kst(start_date),
            endDate=ensure_kst(end_date),
            totalPrice=total_price,
        )

    def add_redemption(self, rental_id: int, coupon_id: int, user_id: int) -> CouponRedemption:
        """
        쿠폰 사용 이력을 저장합니다.

        Raises:
            CouponRedemptionConflict: (coupon_id, user_id) 유니크 제약에 걸린 경우
        """
        try:
            result = self._session.execute(
                text(
                    _with_returning(self._session, _INSERT_REDEMPTION, "redemption_id")
                ).bindparams(bindparam("redeemed_at", type_=DateTime)),
                {
                    "rental_id": rental_id,
                    "coupon_id": coupon_id,
                    "user_id": user_id,
                    "redeemed_at": to_db_kst(now_kst()),
                },
            )
            redemption_id = _inserted_id(self._session, result)
        except IntegrityError as exc:
            if not _is_redemption_conflict(exc):
                raise
            logger.info(
                "쿠폰 중복 사용 감지 - coupon_id=%s, user_id=%s", coupon_id, user_id
            )
            raise CouponRedemptionConflict(coupon_id, user_id) from exc

        return CouponRedemption(
            redemptionId=redemption_id,
            rentalId=rental_id,
            couponId=coupon_id,
            userId=user_id,
        )

    def find_rental_for_owner(self, rental_id: int, user_id: int) -> Rental | None:
        row = (
            self._session.execute(
                text(
                    _SELECT_RENTAL
                    + """
                    WHERE rental_id = :rental_id
                      AND rented_by = :user_id
                    LIMIT 1
                    """
                ).columns(**_RENTAL_COLUMNS),
                {"rental_id": rental_id, "user_id": user_id},
            )
            .mappings()
            .first()
        )
        if row is None:
            return None
        return _to_rental(row)

    def delete_rental(self, rental_id: int) -> None:
        """대여와 연결된 쿠폰 사용 이력을 함께 삭제합니다."""
        self._session.execute(
            text("DELETE FROM coupon_redemptions WHERE rental_id = :rental_id"),
            {"rental_id": rental_id},
        )
        self._session.execute(
            text("DELETE FROM rentals WHERE rental_id = :rental_id"),
            {"rental_id": rental_id},
        )

    def commit(self) -> None:
        self._session.commit()
        self.committed = True


class SQLAlchemyRentalStore(_SQLRepositoryBase):
    """SQLAlchemy를 사용한 대여 저장소 구현"""

    async def run_in_transaction(self, work: Callable[[SQLRentalTransaction], T]) -> T:
        """
        하나의 세션/트랜잭션 안에서 work를 실행합니다.

        work는 워커 스레드 하나에서 처음부터 끝까지 실행되며,
        commit()하지 않았거나 예외가 발생하면 롤백됩니다.
        """
        def _run():
            with self._session_factory() as session:
                tx = SQLRentalTransaction(session)
                try:
                    return work(tx)
                finally:
                    if not tx.committed:
                        try:
                            session.rollback()
                        except SQLAlchemyError:
                            # 연결이 끊긴 경우 등. 세션 close 시 연결이 정리됨
                            logger.warning("트랜잭션 롤백 실패", exc_info=True)

        return await self._run_in_thread(_run)

    async def find_overlapping_rentals(
        self, vehicle_id: int, start_date: datetime, end_date: datetime
    ) -> list[Rental]:
        """잠금 없이 기간이 겹치는 대여를 조회합니다."""
        def _query():
            with self._session_factory() as session:
                return _find_overlapping(session, vehicle_id, start_date, end_date)

        return await self._run_in_thread(_query)

    async def find_rentals_by_member(
        self,
        member_id: int,
        page: int,
        size: int,
    ) -> tuple[list[Rental], int]:
        """
        회원 ID로 대여 목록을 조회합니다 (페이징 지원).

        Returns:
            (대여 목록, 전체 개수) 튜플
        """
        def _query():
            offset = (page - 1) * size

            with self._session_factory() as session:
                total = session.execute(
                    text("SELECT COUNT(*) as total FROM rentals WHERE rented_by = :member_id"),
                    {"member_id": member_id},
                ).scalar() or 0

                rows = (
                    session.execute(
                        text(
                            _SELECT_RENTAL
                            + """
                            WHERE rented_by = :member_id
                            ORDER BY start_date DESC, rental_id DESC
                            LIMIT :size OFFSET :offset
                            """
                        ).columns(**_RENTAL_COLUMNS),
                        {"member_id": member_id, "size": size, "offset": offset},
                    )
                    .mappings()
                    .all()
                )

                return ([_to_rental(row) for row in rows], total)

        return await self._run_in_thread(_query)
