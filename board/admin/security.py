# board/admin/security.py
import hmac

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from ..config import settings

_basic = HTTPBasic(auto_error=False)


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


def is_admin_credentials(credentials: HTTPBasicCredentials | None) -> bool:
    """
    Админ, если логин и пароль совпали с ADMIN_USERNAME/ADMIN_PASSWORD.
    Без пароля админки нет ни у кого.
    """
    if credentials is None or not settings.ADMIN_PASSWORD:
        return False
    user_ok = _same(credentials.username, settings.ADMIN_USERNAME)
    pass_ok = _same(credentials.password, settings.ADMIN_PASSWORD)
    return user_ok and pass_ok


def require_admin(credentials: HTTPBasicCredentials | None = Depends(_basic)) -> bool:
    if not is_admin_credentials(credentials):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="admin only",
            headers={"WWW-Authenticate": "Basic"},
        )
    return True
