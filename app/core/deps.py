import uuid
from datetime import datetime, timezone

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import Forbidden, Unauthorized
from app.core.security import decode_session_token, is_admin_email
from app.db.session import get_db
from app.models.user import User
from app.services.session_cache import SessionCache

bearer = HTTPBearer(auto_error=False)


def get_session_cache(request: Request) -> SessionCache:
    return request.app.state.session_cache


def session_token_from_request(request: Request, creds: HTTPAuthorizationCredentials | None) -> str | None:
    if creds and creds.credentials:
        return creds.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


def _user_is_disabled(db: Session, claims: dict) -> bool:
    try:
        user_id = uuid.UUID(str(claims.get("sub") or ""))
    except ValueError:
        return False
    user = db.get(User, user_id)
    return user is not None and not user.is_active


def resolve_principal(token: str, cache: SessionCache, db: Session | None = None) -> dict | None:
    cached = cache.get(token)
    if cached is not None:
        return cached
    try:
        claims = decode_session_token(token)
    except JWTError:
        return None
    if db is not None and _user_is_disabled(db, claims):
        return None
    principal = {
        "sub": claims.get("sub"),
        "email": str(claims.get("email") or "").strip().lower(),
        "role": claims.get("role") or "user",
        "name": claims.get("name"),
    }
    remaining = int(claims.get("exp", 0)) - int(datetime.now(timezone.utc).timestamp())
    cache.put(token, principal, ttl_seconds=min(settings.SESSION_CACHE_TTL_SECONDS, remaining))
    return principal


def get_optional_principal(
    request: Request,
    creds: HTTPAuthorizationCredentials = Depends(bearer),
    cache: SessionCache = Depends(get_session_cache),
    db: Session = Depends(get_db),
) -> dict | None:
    token = session_token_from_request(request, creds)
    if not token:
        return None
    return resolve_principal(token, cache, db)


def get_current_principal(principal: dict | None = Depends(get_optional_principal)) -> dict:
    if principal is None:
        raise Unauthorized("Sign in required")
    return principal


def get_current_admin(principal: dict = Depends(get_current_principal)) -> dict:
    if not is_admin_email(principal.get("email")):
        raise Forbidden("Admin access required")
    return principal


def principal_role(principal: dict) -> str:
    if is_admin_email(principal.get("email")):
        return "admin"
    return str(principal.get("role") or "user").strip().lower()


def require_role(*roles: str):
    def _inner(principal: dict = Depends(get_current_principal)) -> dict:
        if principal_role(principal) not in roles:
            raise Forbidden("Insufficient permissions")
        return principal
    return _inner
