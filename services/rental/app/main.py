import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.rental.app.api.v1.router import router
from services.rental.app.db.connection import settings
from services.rental.app.db.session import engine
from services.rental.app.db.tables import metadata

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# JWT 설정을 환경 변수로 설정 (libs/common/auth.py가 os.getenv()로 읽을 수 있도록)
# 이미 환경 변수가 있으면 덮어쓰지 않음
os.environ.setdefault("JWT_SECRET_KEY", settings.JWT_SECRET_KEY)
os.environ.setdefault("JWT_ALGORITHM", settings.JWT_ALGORITHM)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.RENTAL_AUTO_CREATE_TABLES:
        logger.info("대여 서비스 테이블 생성 (RENTAL_AUTO_CREATE_TABLES)")
        metadata.create_all(engine)
    yield


app = FastAPI(
    title="Rental Service (차량 대여 서비스)",
    description="Project Dash Rental Micro-Service Server",
    lifespan=lifespan,
)

# CORS 설정
# 환경 변수 ALLOWED_ORIGINS가 설정되어 있으면 우선 사용
# 없으면 개발 환경일 때 기본 localhost 리스트 사용
if settings.ALLOWED_ORIGINS:
    allowed_origins = [origin.strip() for origin in settings.ALLOWED_ORIGINS.split(",") if origin.strip()]
elif settings.is_development:
    allowed_origins = [
        "http://localhost:3000",
        "http://localhost:5173",  # Vite 기본 포트
        "http://localhost:8003",  # Rental 서비스 포트
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8003",
    ]
else:
    # 프로덕션 환경: 환경 변수가 없으면 빈 리스트 (모든 오리진 차단)
    allowed_origins = []

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


# 서비스가 살아있는지 확인하는 헬스 체크 엔드포인트
@app.get("/")
def read_root():
    return {"service": "Rental Service", "status": "running"}
