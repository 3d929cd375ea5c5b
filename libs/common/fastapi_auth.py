"""
FastAPI에서 사용할 수 있는 인증 Dependency 헬퍼
"""
import logging
from typing import Annotated, Tuple

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from libs.common.auth import AuthError, verify_access_token

logger = logging.getLogger(__name__)

# Swagger UI에서 Bearer token을 입력할 수 있도록 HTTPBearer 설정
security = HTTPBearer(description="Access Token (Bearer)", auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(security),
) -> Tuple[str, int]:
    """
    Bearer token에서 사용자 정보를 추출하는 FastAPI Dependency.

    Returns:
        (subject_type, subject_id) 튜플

    Raises:
        HTTPException: 인증 실패 시 HTTP 401 반환
    """
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="",
        )

    try:
        return verify_access_token(credentials.credentials)
    except AuthError as e:
        logger.info("인증 실패: %s %s", e.code, e.message)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="",
        ) from e


# Type alias for dependency injection
CurrentUser = Annotated[Tuple[str, int], Depends(get_current_user)]
