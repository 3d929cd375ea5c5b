"""
공통 인증 모듈
모든 MSA에서 사용할 수 있는 JWT 토큰 검증 로직을 제공합니다.
"""
import logging
import os
from typing import Tuple

import jwt

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """인증 관련 에러"""
    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def get_jwt_config() -> Tuple[str, str]:
    """
    환경 변수에서 JWT 설정을 읽어옵니다.

    Returns:
        (secret_key, algorithm) 튜플
    """
    secret_key = os.getenv("JWT_SECRET_KEY")
    algorithm = os.getenv("JWT_ALGORITHM", "HS256")

    if not secret_key:
        # 서비스별 키가 있으면 사용 (인증 서비스와 동일한 키여야 함)
        secret_key = os.getenv("AUTH_JWT_SECRET_KEY") or os.getenv("RENTAL_JWT_SECRET_KEY")
        if not secret_key:
            # 개발용 기본값 (프로덕션에서는 절대 사용하지 말 것)
            logger.warning("JWT_SECRET_KEY가 설정되지 않아 개발용 기본 키를 사용합니다.")
            secret_key = "change-me-in-production"

    return (secret_key, algorithm)


def verify_access_token(access_token: str, secret_key: str | None = None, algorithm: str | None = None) -> Tuple[str, int]:
    """
    Access token을 JWT 방식으로 검증하고 subject_type과 subject_id를 반환합니다.
    DB 조회 없이 토큰 자체에서 정보를 추출합니다.

    Args:
        access_token: 검증할 access token (JWT)
        secret_key: JWT 서명에 사용할 시크릿 키 (None이면 환경 변수에서 읽음)
        algorithm: JWT 알고리즘 (None이면 환경 변수에서 읽거나 기본값 HS256 사용)

    Returns:
        (subject_type, subject_id) 튜플

    Raises:
        AuthError: 토큰이 유효하지 않은 경우
    """
    if not secret_key or not algorithm:
        secret_key, algorithm = get_jwt_config()

    try:
        payload = jwt.decode(access_token, secret_key, algorithms=[algorithm])
    except jwt.ExpiredSignatureError as e:
        raise AuthError("ERR-IVD-PARAM", "access token이 만료되었습니다.") from e
    except jwt.InvalidTokenError as e:
        raise AuthError("ERR-IVD-PARAM", "access token이 유효하지 않습니다.") from e

    subject_type = payload.get("sub_type")
    subject_id = payload.get("sub_id")
    if not subject_type or not subject_id:
        raise AuthError("ERR-IVD-PARAM", "access token에 필수 정보가 없습니다.")

    try:
        return (subject_type, int(subject_id))
    except (TypeError, ValueError) as e:
        raise AuthError("ERR-IVD-PARAM", "access token의 사용자 식별자가 올바르지 않습니다.") from e
