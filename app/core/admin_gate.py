from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse

from app.core.config import settings
from app.core.deps import resolve_principal
from app.core.security import is_admin_email

ADMIN_PREFIX = "/admin"
ADMIN_LOGIN_PATH = "/admin/login"
_LOG = logging.getLogger("app.auth.gate")


def _is_admin_path(path: str) -> bool:
    return path == ADMIN_PREFIX or path.startswith(ADMIN_PREFIX + "/")


def request_is_admin(request: Request) -> bool:
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return False
    principal = resolve_principal(token, request.app.state.session_cache)
    return principal is not None and is_admin_email(principal.get("email"))


def install_admin_gate(app: FastAPI) -> None:
    """Redirect browser navigation under /admin based on the session cookie.

    API routes under /api/admin are not affected; they answer 401/403 from
    their dependencies instead.
    """

    @app.middleware("http")
    async def _admin_gate_middleware(request: Request, call_next):
        path = request.url.path.rstrip("/") or "/"
        if _is_admin_path(path):
            is_admin = request_is_admin(request)
            if path == ADMIN_LOGIN_PATH:
                if is_admin:
                    return RedirectResponse(ADMIN_PREFIX, status_code=303)
            elif not is_admin:
                _LOG.info("redirecting %s to login", path)
                return RedirectResponse(ADMIN_LOGIN_PATH, status_code=303)
        return await call_next(request)
