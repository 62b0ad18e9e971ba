import base64
import hashlib
import hmac
import time

from fastapi import HTTPException, status

from interview_prep.core.config import Settings, get_settings

DEFAULT_USER_ID = "local-user"


def _sign(message: str, settings: Settings) -> str:
    digest = hmac.new(
        settings.secret_key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.urlsafe_b64encode(digest).decode("utf-8")


def create_session_token(user_id: str, *, settings: Settings | None = None) -> str:
    """Issue a signed token carrying the opaque user id and its expiry."""
    settings = settings or get_settings()
    expiry = int(time.time()) + settings.token_ttl_seconds
    payload = f"{user_id}:{expiry}"
    signature = _sign(payload, settings)
    return base64.urlsafe_b64encode(f"{payload}:{signature}".encode("utf-8")).decode("utf-8")


def verify_session_token(token: str, *, settings: Settings | None = None) -> str | None:
    settings = settings or get_settings()
    try:
        decoded = base64.urlsafe_b64decode(token.encode("utf-8")).decode("utf-8")
        # user ids may themselves contain ":"; the last two fields are fixed
        user_id, expiry_raw, signature = decoded.rsplit(":", 2)
        expiry = int(expiry_raw)
    except ValueError:
        return None

    expected = _sign(f"{user_id}:{expiry_raw}", settings)
    if not hmac.compare_digest(signature, expected):
        return None
    if expiry < int(time.time()):
        return None
    return user_id


def validate_login_api_key(api_key: str, *, settings: Settings | None = None) -> None:
    settings = settings or get_settings()
    if not hmac.compare_digest(api_key.encode("utf-8"), settings.local_api_key.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )
