from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from app.core.config import settings
from app.core.errors import RemoteFailure, Unauthorized

_LOG = logging.getLogger("app.auth.google")


@dataclass
class GoogleProfile:
    email: str
    name: str | None
    picture: str | None
    email_verified: bool


def authorization_url(state: str) -> str:
    params = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "redirect_uri": settings.GOOGLE_REDIRECT_URI,
        "response_type": "code",
        "scope": "openid email profile",
        "state": state,
        "prompt": "select_account",
    }
    return f"{settings.GOOGLE_AUTH_URL}?{urlencode(params)}"


def _json_object(response: httpx.Response, what: str) -> dict:
    try:
        body = response.json()
    except ValueError:
        _LOG.warning("Google %s response is not JSON: status=%s", what, response.status_code)
        raise RemoteFailure("Google sign-in returned an unreadable response")
    return body if isinstance(body, dict) else {}


class GoogleOAuthClient:
    def __init__(self, transport: httpx.BaseTransport | None = None):
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=settings.GOOGLE_HTTP_TIMEOUT_SECONDS, transport=self._transport)

    def exchange_code(self, code: str) -> str:
        data = {
            "code": code,
            "client_id": settings.GOOGLE_CLIENT_ID,
            "client_secret": settings.GOOGLE_CLIENT_SECRET,
            "redirect_uri": settings.GOOGLE_REDIRECT_URI,
            "grant_type": "authorization_code",
        }
        try:
            with self._client() as client:
                response = client.post(settings.GOOGLE_TOKEN_URL, data=data)
        except httpx.HTTPError as exc:
            _LOG.warning("Google token exchange failed: %s", exc)
            raise RemoteFailure("Google sign-in is unavailable")
        if response.status_code >= 400:
            _LOG.info("Google token exchange rejected: status=%s", response.status_code)
            raise Unauthorized("Google sign-in was rejected")
        access_token = str(_json_object(response, "token").get("access_token") or "")
        if not access_token:
            raise Unauthorized("Google sign-in returned no access token")
        return access_token

    def fetch_profile(self, access_token: str) -> GoogleProfile:
        try:
            with self._client() as client:
                response = client.get(settings.GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
        except httpx.HTTPError as exc:
            _LOG.warning("Google userinfo request failed: %s", exc)
            raise RemoteFailure("Google sign-in is unavailable")
        if response.status_code >= 400:
            raise Unauthorized("Google profile request was rejected")
        body = _json_object(response, "userinfo")
        email = str(body.get("email") or "").strip().lower()
        if not email:
            raise Unauthorized("Google account has no email")
        return GoogleProfile(
            email=email,
            name=body.get("name"),
            picture=body.get("picture"),
            email_verified=bool(body.get("email_verified", False)),
        )


def get_google_client() -> GoogleOAuthClient:
    return GoogleOAuthClient()
