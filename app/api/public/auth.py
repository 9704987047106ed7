import logging
from datetime import datetime, timezone
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import bearer, get_current_principal, get_session_cache, principal_role, session_token_from_request
from app.core.errors import CatalogError, Unauthorized
from app.core.security import create_session_token, is_admin_email, new_oauth_state
from app.db.session import get_db
from app.models.user import User
from app.services.google_oauth import GoogleOAuthClient, GoogleProfile, authorization_url, get_google_client
from app.services.session_cache import SessionCache

router = APIRouter()
_LOG = logging.getLogger("app.auth")


def _login_error_redirect(reason: str) -> RedirectResponse:
    response = RedirectResponse("/admin/login?" + urlencode({"error": reason}), status_code=303)
    response.delete_cookie(settings.OAUTH_STATE_COOKIE_NAME)
    return response


def _upsert_user(db: Session, profile: GoogleProfile) -> User:
    user = db.query(User).filter(User.email == profile.email).first()
    if user is None:
        user = User(
            email=profile.email,
            display_name=profile.name,
            avatar_url=profile.picture,
            role="admin" if is_admin_email(profile.email) else "user",
        )
    else:
        user.display_name = profile.name or user.display_name
        user.avatar_url = profile.picture or user.avatar_url
        user.updated_at = datetime.now(timezone.utc)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@router.get("/login")
def login():
    state = new_oauth_state()
    response = RedirectResponse(authorization_url(state), status_code=302)
    response.set_cookie(
        settings.OAUTH_STATE_COOKIE_NAME,
        state,
        max_age=600,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    return response


@router.get("/callback")
def callback(
    request: Request,
    code: str | None = Query(None),
    state: str | None = Query(None),
    error: str | None = Query(None),
    db: Session = Depends(get_db),
    google: GoogleOAuthClient = Depends(get_google_client),
    cache: SessionCache = Depends(get_session_cache),
):
    if error:
        return _login_error_redirect(error)
    expected_state = request.cookies.get(settings.OAUTH_STATE_COOKIE_NAME)
    if not code or not state or not expected_state or state != expected_state:
        return _login_error_redirect("invalid_state")
    try:
        profile = google.fetch_profile(google.exchange_code(code))
    except CatalogError as exc:
        _LOG.info("Google sign-in failed: %s", exc.message)
        return _login_error_redirect("oauth_failed")
    if not profile.email_verified:
        return _login_error_redirect("email_not_verified")

    user = _upsert_user(db, profile)
    if not user.is_active:
        return _login_error_redirect("account_disabled")
    role = "admin" if is_admin_email(user.email) else user.role
    token = create_session_token(sub=str(user.id), email=user.email, role=role, name=user.display_name)
    cache.put(
        token,
        {"sub": str(user.id), "email": user.email, "role": role, "name": user.display_name},
        ttl_seconds=settings.SESSION_CACHE_TTL_SECONDS,
    )
    _LOG.info("signed in %s role=%s", user.email, role)

    response = RedirectResponse("/admin" if is_admin_email(user.email) else "/", status_code=303)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.SESSION_JWT_TTL_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    response.delete_cookie(settings.OAUTH_STATE_COOKIE_NAME)
    return response


@router.post("/logout")
def logout(
    request: Request,
    creds: HTTPAuthorizationCredentials = Depends(bearer),
    cache: SessionCache = Depends(get_session_cache),
):
    token = session_token_from_request(request, creds)
    if token:
        cache.invalidate(token)
    response = JSONResponse({"status": "signed_out"})
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


@router.get("/me")
def me(principal: dict = Depends(get_current_principal)):
    if not principal.get("email"):
        raise Unauthorized("Session has no email")
    return {
        "id": principal.get("sub"),
        "email": principal.get("email"),
        "name": principal.get("name"),
        "role": principal_role(principal),
        "is_admin": is_admin_email(principal.get("email")),
    }
