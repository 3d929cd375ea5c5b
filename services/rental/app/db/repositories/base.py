import asyncio
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from services.rental.app.core.RentalService import RentalStoreError
from services.rental.app.db.session import SessionLocal


class _SQLRepositoryBase:
    """SQL Repository 기본 클래스"""
    def __init__(self, session_factory: Callable[[], Session] = SessionLocal):
        self._session_factory = session_factory

    async def _run_in_thread(self, func: Callable):
        """동기 함수를 비동기로 실행 (DB 오류는 RentalStoreError로 변환)"""
        try:
            return await asyncio.to_thread(func)
        except SQLAlchemyError as exc:
            raise RentalStoreError(str(exc)) from exc
