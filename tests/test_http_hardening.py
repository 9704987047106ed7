import unittest

from starlette.requests import Request

from tests.base import *  # noqa: F401,F403
from tests.base import CatalogTestBase

from app.core.http_hardening import _cache_headers, _request_id_from_header


def _request(path: str, method: str = "GET", headers: list[tuple[bytes, bytes]] | None = None) -> Request:
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "query_string": b"",
        "headers": headers or [],
        "client": ("127.0.0.1", 12345),
        "server": ("testserver", 80),
    }
    return Request(scope)


class HttpHardeningTests(CatalogTestBase):
    def test_health_has_security_headers_and_request_id(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)

        self.assertEqual(response.headers.get("x-content-type-options"), "nosniff")
        self.assertEqual(response.headers.get("x-frame-options"), "DENY")
        self.assertEqual(response.headers.get("referrer-policy"), "strict-origin-when-cross-origin")
        self.assertEqual(response.headers.get("cross-origin-opener-policy"), "same-origin")
        self.assertIn("frame-ancestors 'none'", response.headers.get("content-security-policy", ""))

        request_id = response.headers.get("x-request-id")
        self.assertIsNotNone(request_id)
        self.assertRegex(str(request_id), r"^[A-Za-z0-9._-]{1,128}$")

    def test_valid_request_id_is_preserved(self):
        external_request_id = "catalog-check-2026_10_19"
        response = self.client.get("/health", headers={"X-Request-ID": external_request_id})
        self.assertEqual(response.headers.get("x-request-id"), external_request_id)

    def test_invalid_request_id_is_replaced(self):
        bad_request_id = "bad id with spaces"
        response = self.client.get("/health", headers={"X-Request-ID": bad_request_id})

        response_request_id = response.headers.get("x-request-id")
        self.assertIsNotNone(response_request_id)
        self.assertNotEqual(response_request_id, bad_request_id)
        self.assertRegex(str(response_request_id), r"^[A-Za-z0-9._-]{1,128}$")

    def test_request_id_parsing(self):
        self.assertEqual(_request_id_from_header(" abc-1 "), "abc-1")
        self.assertRegex(_request_id_from_header(None), r"^[0-9a-f]{32}$")
        self.assertRegex(_request_id_from_header("x" * 200), r"^[0-9a-f]{32}$")

    def test_anonymous_kit_listing_is_cacheable(self):
        response = self.client.get("/api/kits")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers.get("cache-control"), f"public, max-age={settings.PUBLIC_CACHE_MAX_AGE_SECONDS}")
        self.assertEqual(response.headers.get("vary"), "Cookie, Authorization")

    def test_signed_in_kit_listing_is_not_cached(self):
        response = self.client.get("/api/kits", headers=self._auth_headers())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.headers.get("cache-control"), "no-store")
        self.assertEqual(response.headers.get("pragma"), "no-cache")

    def test_error_response_keeps_security_headers_and_request_id(self):
        response = self.client.get("/api/kits/not-a-kit")
        self.assertIn(response.status_code, (400, 404))
        self.assertEqual(response.headers.get("x-content-type-options"), "nosniff")
        self.assertEqual(response.headers.get("x-frame-options"), "DENY")
        self.assertEqual(response.headers.get("cache-control"), "no-store")
        self.assertTrue(bool(response.headers.get("x-request-id")))

    def test_cache_rules(self):
        cacheable = _cache_headers(_request("/api/filters"), 200)
        self.assertTrue(cacheable["Cache-Control"].startswith("public"))

        self.assertEqual(_cache_headers(_request("/api/kits", method="POST"), 200)["Cache-Control"], "no-store")
        self.assertEqual(_cache_headers(_request("/api/kits"), 500)["Cache-Control"], "no-store")
        self.assertEqual(_cache_headers(_request("/api/kitsune"), 200)["Cache-Control"], "no-store")
        self.assertEqual(_cache_headers(_request("/api/suggestions"), 200)["Cache-Control"], "no-store")

        cookie = [(b"cookie", f"{settings.SESSION_COOKIE_NAME}=token".encode())]
        self.assertEqual(_cache_headers(_request("/api/stats", headers=cookie), 200)["Cache-Control"], "no-store")


if __name__ == "__main__":
    unittest.main()
