"""
Dash 공통 라이브러리
모든 MSA에서 사용할 수 있는 공통 기능을 제공합니다.
"""

from libs.common.auth import AuthError, get_jwt_config, verify_access_token
from libs.common.fastapi_auth import CurrentUser, get_current_user, security
from libs.common.timezone import KST_TIMEZONE, ensure_kst, now_kst, to_db_kst

__all__ = [
    "AuthError",
    "verify_access_token",
    "get_jwt_config",
    "get_current_user",
    "CurrentUser",
    "security",
    "KST_TIMEZONE",
    "now_kst",
    "ensure_kst",
    "to_db_kst",
]
