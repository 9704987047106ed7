import secrets
from datetime import datetime, timedelta, timezone
from jose import jwt

from app.core.config import settings

def create_jwt(payload: dict, secret: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    data = payload.copy()
    data.update({"iat": int(now.timestamp()), "exp": int((now + expires_delta).timestamp())})
    return jwt.encode(data, secret, algorithm="HS256")

def decode_jwt(token: str, secret: str) -> dict:
    return jwt.decode(token, secret, algorithms=["HS256"])

def create_session_token(*, sub: str, email: str, role: str, name: str | None = None) -> str:
    return create_jwt(
        {"sub": sub, "email": email.strip().lower(), "role": role, "name": name},
        settings.SESSION_JWT_SECRET,
        timedelta(minutes=settings.SESSION_JWT_TTL_MINUTES),
    )

def decode_session_token(token: str) -> dict:
    return decode_jwt(token, settings.SESSION_JWT_SECRET)

def new_oauth_state() -> str:
    return secrets.token_urlsafe(24)

def is_admin_email(email: str | None) -> bool:
    expected = settings.admin_email_normalized
    return bool(expected) and str(email or "").strip().lower() == expected
