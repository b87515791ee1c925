# board/deps.py
from __future__ import annotations

from typing import Optional

from fastapi import Header, Request


def get_client_ip(
    request: Request,
    x_forwarded_for: Optional[str] = Header(None, alias="X-Forwarded-For"),
    x_real_ip: Optional[str] = Header(None, alias="X-Real-IP"),
) -> str | None:
    # 1) первый адрес из цепочки прокси
    if x_forwarded_for and x_forwarded_for.strip():
        return x_forwarded_for.split(",")[0].strip()
    # 2) nginx
    if x_real_ip and x_real_ip.strip():
        return x_real_ip.strip()
    # 3) адрес сокета
    return request.client.host if request.client else None


def get_edit_token(x_edit_token: Optional[str] = Header(None, alias="X-Edit-Token")) -> str | None:
    return x_edit_token
