import unittest
from uuid import uuid4

from tests.base import *  # noqa: F401,F403
from tests.base import CatalogTestBase


class SuggestionFlowTests(CatalogTestBase):
    def setUp(self):
        super().setUp()
        self.user_id = str(uuid4())
        self.user = self._auth_headers("fan@example.com", "user", sub=self.user_id)
        self.other = self._auth_headers("other@example.com", "user")
        self.moderator = self._auth_headers("mod@example.com", "moderator")
        self.admin = self._admin_headers()
        self.kit = self.make_kit("자쿠 II", price_krw=15000)

    def _suggest(self, payload: dict, headers=None):
        return self.client.post("/api/suggestions", json=payload, headers=headers or self.user)

    def _edit(self, **data):
        response = self._suggest({"kit_id": str(self.kit.id), "suggestion_type": "edit", "suggested_data": data, "reason": " 가격 인상 "})
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["data"]

    def _review(self, suggestion_id: str, status: str, headers=None, comment: str | None = None):
        return self.client.post(
            f"/api/suggestions/{suggestion_id}/review",
            json={"status": status, "review_comment": comment},
            headers=headers or self.admin,
        )

    def test_create_requires_session(self):
        response = self.client.post("/api/suggestions", json={"suggestion_type": "new", "suggested_data": {"name_ko": "x"}})
        self.assertEqual(response.status_code, 401)

    def test_created_suggestion_is_pending(self):
        data = self._edit(price_krw=17000)
        self.assertEqual(data["status"], "pending")
        self.assertEqual(data["user_id"], self.user_id)
        self.assertEqual(data["kit_id"], str(self.kit.id))
        self.assertEqual(data["reason"], "가격 인상")

    def test_edit_needs_existing_kit(self):
        self.assertEqual(self._suggest({"suggestion_type": "edit", "suggested_data": {"price_krw": 1}}).status_code, 400)
        missing = self._suggest({"kit_id": str(uuid4()), "suggestion_type": "edit", "suggested_data": {"price_krw": 1}})
        self.assertEqual(missing.status_code, 404)

    def test_unknown_kit_fields_are_rejected(self):
        response = self._suggest({"kit_id": str(self.kit.id), "suggestion_type": "edit", "suggested_data": {"status": "active"}})
        self.assertEqual(response.status_code, 400)
        self.assertIn("status", response.json()["error"])

    def test_invalid_type_is_rejected(self):
        response = self._suggest({"suggestion_type": "merge", "suggested_data": {}})
        self.assertEqual(response.status_code, 400)

    def test_users_see_only_their_own(self):
        self._edit(price_krw=17000)
        self.assertEqual(len(self.client.get("/api/suggestions", headers=self.user).json()["data"]), 1)
        self.assertEqual(self.client.get("/api/suggestions", headers=self.other).json()["data"], [])
        self.assertEqual(len(self.client.get("/api/suggestions", headers=self.moderator).json()["data"]), 1)
        self.assertEqual(len(self.client.get("/api/suggestions", headers=self.admin).json()["data"]), 1)

    def test_status_filter(self):
        self._edit(price_krw=17000)
        self.assertEqual(self.client.get("/api/suggestions", params={"status": "approved"}, headers=self.admin).json()["data"], [])
        self.assertEqual(self.client.get("/api/suggestions", params={"status": "unknown"}, headers=self.admin).status_code, 400)

    def test_regular_user_cannot_review(self):
        data = self._edit(price_krw=17000)
        self.assertEqual(self._review(data["id"], "approved", headers=self.user).status_code, 403)

    def test_approved_edit_updates_kit(self):
        data = self._edit(price_krw=17000, release_date="2021-05-01")
        response = self._review(data["id"], "approved", comment="확인")
        self.assertEqual(response.status_code, 200)
        reviewed = response.json()["data"]
        self.assertEqual(reviewed["status"], "approved")
        self.assertEqual(reviewed["review_comment"], "확인")
        self.assertIsNotNone(reviewed["reviewed_at"])

        kit = self._get(GundamKit, self.kit.id)
        self.assertEqual(kit.price_krw, 17000)
        self.assertEqual(kit.release_date.isoformat(), "2021-05-01")

    def test_moderator_can_reject(self):
        data = self._edit(price_krw=17000)
        response = self._review(data["id"], "rejected", headers=self.moderator)
        self.assertEqual(response.json()["data"]["status"], "rejected")
        self.assertEqual(self._get(GundamKit, self.kit.id).price_krw, 15000)

    def test_reviewed_suggestion_cannot_be_reviewed_again(self):
        data = self._edit(price_krw=17000)
        self._review(data["id"], "rejected")
        response = self._review(data["id"], "approved")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Suggestion is already rejected")

    def test_approved_new_kit_is_inserted(self):
        response = self._suggest({"suggestion_type": "new", "suggested_data": {"name_ko": "새 키트", "price_krw": "25000"}})
        self.assertEqual(response.status_code, 201)
        self._review(response.json()["data"]["id"], "approved")
        self.assertEqual(self._count(GundamKit, GundamKit.name_ko == "새 키트", GundamKit.price_krw == 25000), 1)

    def test_failed_approval_leaves_suggestion_pending(self):
        response = self._suggest({"suggestion_type": "new", "suggested_data": {"price_krw": 25000}})
        suggestion_id = response.json()["data"]["id"]
        self.assertEqual(self._review(suggestion_id, "approved").status_code, 400)
        rows = self.client.get("/api/suggestions", headers=self.admin).json()["data"]
        self.assertEqual(rows[0]["status"], "pending")
        self.assertEqual(self._count(GundamKit), 1)

    def test_approved_delete_discontinues_kit(self):
        response = self._suggest({"kit_id": str(self.kit.id), "suggestion_type": "delete"})
        self.assertEqual(response.status_code, 201)
        self._review(response.json()["data"]["id"], "approved")
        self.assertEqual(self._get(GundamKit, self.kit.id).status, "discontinued")
        self.assertEqual(self.client.get("/api/kits").json()["pagination"]["total"], 0)

    def test_malformed_suggestion_id(self):
        self.assertEqual(self._review("nope", "approved").status_code, 400)
        self.assertEqual(self._review(str(uuid4()), "approved").status_code, 404)

    def test_invalid_review_status(self):
        data = self._edit(price_krw=17000)
        self.assertEqual(self._review(data["id"], "maybe").status_code, 400)


if __name__ == "__main__":
    unittest.main()
