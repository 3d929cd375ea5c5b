from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from services.rental.app.db.connection import settings


def build_engine(database_url: str, lock_timeout: float = settings.RENTAL_DB_LOCK_TIMEOUT) -> Engine:
    """
    DB 엔진을 생성합니다.

    SQLite는 행 잠금이 없으므로 모든 트랜잭션을 BEGIN IMMEDIATE로 시작하여
    쓰기 트랜잭션을 DB 단위로 직렬화합니다.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            pool_pre_ping=True,
            pool_recycle=3600,
            future=True,
        )

    engine = create_engine(
        database_url,
        connect_args={"timeout": lock_timeout, "check_same_thread": False},
        future=True,
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transaction(dbapi_connection, connection_record):
        # pysqlite의 자체 BEGIN 처리를 끄고 아래 begin 이벤트에서 직접 시작
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = build_engine(settings.RENTAL_DATABASE_URL)

SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

