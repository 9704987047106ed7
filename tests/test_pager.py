import unittest

from app.core.errors import ValidationError
from app.services.pager import PageResult, clamp_page, page_window, total_pages


class PagerTests(unittest.TestCase):
    def test_total_pages_rounds_up(self):
        self.assertEqual(total_pages(95, 40), 3)
        self.assertEqual(total_pages(80, 40), 2)
        self.assertEqual(total_pages(1, 40), 1)

    def test_empty_result_still_has_one_page(self):
        self.assertEqual(total_pages(0, 20), 1)

    def test_page_window_offsets(self):
        window = page_window(3, 40)
        self.assertEqual(window.offset, 80)
        self.assertEqual(window.limit, 40)
        self.assertEqual(page_window(1, 20).offset, 0)

    def test_page_window_rejects_invalid_input(self):
        with self.assertRaises(ValidationError):
            page_window(0, 20)
        with self.assertRaises(ValidationError):
            page_window(1, 0)

    def test_clamp_page(self):
        self.assertEqual(clamp_page(5, 3), 3)
        self.assertEqual(clamp_page(0, 3), 1)
        self.assertEqual(clamp_page(2, 0), 1)

    def test_page_result_envelope(self):
        result = PageResult(rows=[{"id": 1}], total_count=45, page=3, page_size=20)
        self.assertEqual(
            result.to_envelope(),
            {"data": [{"id": 1}], "pagination": {"page": 3, "limit": 20, "total": 45, "totalPages": 3}},
        )
        self.assertFalse(result.is_past_end)

    def test_page_past_end_is_reported(self):
        result = PageResult(rows=[], total_count=10, page=4, page_size=5)
        self.assertEqual(result.total_pages, 2)
        self.assertTrue(result.is_past_end)

    def test_from_envelope_reads_pagination(self):
        result = PageResult.from_envelope(
            {"data": [{"id": "a"}, {"id": "b"}], "pagination": {"page": 2, "limit": 2, "total": 5, "totalPages": 3}}
        )
        self.assertEqual(result.rows, [{"id": "a"}, {"id": "b"}])
        self.assertEqual(result.total_count, 5)
        self.assertEqual(result.page, 2)
        self.assertEqual(result.total_pages, 3)

    def test_map_keeps_pagination(self):
        result = PageResult(rows=[1, 2], total_count=7, page=1, page_size=2).map(lambda value: value * 10)
        self.assertEqual(result.rows, [10, 20])
        self.assertEqual(result.total_pages, 4)


if __name__ == "__main__":
    unittest.main()
