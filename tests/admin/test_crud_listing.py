import unittest

from tests.admin.base import *  # noqa: F401,F403
from tests.admin.base import AdminCrudBase


class AdminCrudListingTests(AdminCrudBase):
    def _seed_series(self):
        uc = self.make_timeline("UC", "우주세기")
        ce = self.make_timeline("CE", "코즈믹 이라")
        rows = [
            Series(name_ko="기동전사 건담", name_en="Mobile Suit Gundam", timeline_id=uc.id, year_start=1979),
            Series(name_ko="기동전사 Z건담", name_en="Zeta Gundam", timeline_id=uc.id, year_start=1985),
            Series(name_ko="기동전사 건담 ZZ", name_en="Gundam ZZ", timeline_id=uc.id, year_start=1986),
            Series(name_ko="건담 SEED", name_en="Gundam SEED", timeline_id=ce.id, year_start=2002),
            Series(name_ko="철혈의 오펀스", name_en="Iron-Blooded Orphans", timeline_id=None, year_start=2015),
        ]
        for row in rows:
            self._add(row)
        return uc, ce

    def test_default_page_uses_resource_page_size(self):
        self.make_kits(45)
        body = self._crud("GET", "kits").json()
        self.assertEqual(body["pagination"], {"page": 1, "limit": 40, "total": 45, "totalPages": 2})
        self.assertEqual(len(body["data"]), 40)

    def test_pagination_window(self):
        self.make_kits(45)
        body = self._crud("GET", "kits", params={"limit": 20, "page": 3}).json()
        self.assertEqual(body["pagination"], {"page": 3, "limit": 20, "total": 45, "totalPages": 3})
        self.assertEqual(len(body["data"]), 5)

    def test_page_size_is_capped(self):
        body = self._crud("GET", "kits", params={"limit": 5000}).json()
        self.assertEqual(body["pagination"]["limit"], settings.ADMIN_MAX_PAGE_SIZE)

    def test_invalid_paging_parameters(self):
        self.assertEqual(self._crud("GET", "kits", params={"page": 0}).status_code, 400)
        self.assertEqual(self._crud("GET", "kits", params={"limit": "many"}).status_code, 400)
        self.assertEqual(self._crud("GET", "kits", params={"sortOrder": "sideways"}).status_code, 400)

    def test_search_spans_search_fields(self):
        self._seed_series()
        body = self._crud("GET", "series", params={"search": "zeta"}).json()
        self.assertEqual([row["name_ko"] for row in body["data"]], ["기동전사 Z건담"])

        body = self._crud("GET", "series", params={"search": " 기동전사 ", "sortBy": "year_start", "sortOrder": "asc"}).json()
        self.assertEqual([row["year_start"] for row in body["data"]], [1979, 1985, 1986])

    def test_equality_and_set_filters(self):
        uc, ce = self._seed_series()
        body = self._crud("GET", "series", params={"timeline_id": str(ce.id)}).json()
        self.assertEqual([row["name_ko"] for row in body["data"]], ["건담 SEED"])

        body = self._crud("GET", "series", params={"timeline_id": f"{uc.id},{ce.id}"}).json()
        self.assertEqual(body["pagination"]["total"], 4)

    def test_range_filter(self):
        self._seed_series()
        body = self._crud(
            "GET",
            "series",
            params={"year_start__min": 1980, "year_start__max": 2002, "sortBy": "year_start", "sortOrder": "asc"},
        ).json()
        self.assertEqual([row["year_start"] for row in body["data"]], [1985, 1986, 2002])

    def test_unknown_filter_field_is_400(self):
        response = self._crud("GET", "series", params={"bogus": "1"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], 'Field "bogus" cannot be filtered on "series"')

    def test_unknown_sort_field_is_400(self):
        response = self._crud("GET", "series", params={"sortBy": "password"})
        self.assertEqual(response.status_code, 400)

    def test_invalid_filter_value_is_400(self):
        response = self._crud("GET", "series", params={"year_start__min": "soon"})
        self.assertEqual(response.status_code, 400)

    def test_empty_filter_values_are_ignored(self):
        self._seed_series()
        body = self._crud("GET", "series", params={"timeline_id": "", "search": "   "}).json()
        self.assertEqual(body["pagination"]["total"], 5)

    def test_default_sort_is_resource_specific(self):
        self._add(Grade(code="MG", name="Master Grade", sort_order=2))
        self._add(Grade(code="HG", name="High Grade", sort_order=1))
        self._add(Grade(code="PG", name="Perfect Grade", sort_order=3))
        body = self._crud("GET", "grades").json()
        self.assertEqual([row["code"] for row in body["data"]], ["HG", "MG", "PG"])


if __name__ == "__main__":
    unittest.main()
