import hmac
import secrets

# 32 байта = 256 бит энтропии
EDIT_TOKEN_BYTES = 32


def generate_edit_token() -> str:
    """Непредсказуемый токен редактирования (64 hex-символа)."""
    return secrets.token_hex(EDIT_TOKEN_BYTES)


def tokens_match(expected: str | None, provided: str | None) -> bool:
    if not expected or not provided:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))


def mask_token(token: str | None) -> str:
    # в логи идёт только короткий префикс
    if not token:
        return "-"
    return f"{token[:6]}…"
