from __future__ import annotations

import logging
import re
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request

from app.core.config import settings

REQUEST_ID_HEADER = "X-Request-ID"
_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9._-]{1,128}$")
_LOG = logging.getLogger("app.http")

# Anonymous catalog reads that browsers and CDNs may cache briefly.
PUBLIC_CACHEABLE_PREFIXES = ("/api/kits", "/api/filters", "/api/stats")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-site",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=(), usb=()",
    "Content-Security-Policy": "default-src 'self'; img-src 'self' https: data:; object-src 'none'; frame-ancestors 'none'; base-uri 'self'",
}


def _request_id_from_header(raw: str | None) -> str:
    value = str(raw or "").strip()
    if not value:
        return uuid4().hex
    if not _REQUEST_ID_RE.fullmatch(value):
        return uuid4().hex
    return value


def _is_public_cacheable(request: Request, status_code: int) -> bool:
    if request.method != "GET" or status_code != 200:
        return False
    if settings.SESSION_COOKIE_NAME in request.cookies or "authorization" in request.headers:
        return False
    path = request.url.path
    return any(path == prefix or path.startswith(prefix + "/") for prefix in PUBLIC_CACHEABLE_PREFIXES)


def _cache_headers(request: Request, status_code: int) -> dict[str, str]:
    if _is_public_cacheable(request, status_code):
        return {"Cache-Control": f"public, max-age={settings.PUBLIC_CACHE_MAX_AGE_SECONDS}", "Vary": "Cookie, Authorization"}
    return {"Cache-Control": "no-store", "Pragma": "no-cache", "Expires": "0"}


def install_http_hardening(app: FastAPI) -> None:
    @app.middleware("http")
    async def _http_hardening_middleware(request: Request, call_next):
        request_id = _request_id_from_header(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        started_at = perf_counter()

        response = await call_next(request)

        for key, value in SECURITY_HEADERS.items():
            response.headers[key] = value
        for key, value in _cache_headers(request, response.status_code).items():
            response.headers[key] = value
        response.headers[REQUEST_ID_HEADER] = request_id

        duration_ms = (perf_counter() - started_at) * 1000.0
        log = _LOG.warning if response.status_code >= 500 else _LOG.info
        log(
            "%s %s status=%s duration_ms=%.2f request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            request_id,
        )
        return response
