import unittest
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy import Boolean, Date, DateTime, Float, Integer, Numeric, String, create_engine
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from app.core.errors import InvalidFilterField, ValidationError
from app.schemas.list_query import EqualsClause, InClause, ListQuery, RangeClause, RangeValue, TextSearchClause
from app.services.list_query import coerce_column_value, build_filter_clauses, escape_like, run_list_query


class _Base(DeclarativeBase):
    pass


class _CoercionModel(_Base):
    __tablename__ = "_lq_test_model"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    bool_col: Mapped[bool] = mapped_column(Boolean)
    int_col: Mapped[int] = mapped_column(Integer)
    float_col: Mapped[float] = mapped_column(Float)
    numeric_col: Mapped[Decimal] = mapped_column(Numeric(12, 2))
    date_col: Mapped[date] = mapped_column(Date)
    dt_col: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    uuid_col: Mapped[uuid.UUID] = mapped_column(PGUUID(as_uuid=True))
    text_col: Mapped[str] = mapped_column(String(50))


class _ApplyBase(DeclarativeBase):
    pass


class _ListingRow(_ApplyBase):
    __tablename__ = "_lq_apply_test_model"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(50))
    price: Mapped[int] = mapped_column(Integer)
    grade: Mapped[str] = mapped_column(String(10))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False))


def _query(**kwargs) -> ListQuery:
    kwargs.setdefault("table_name", "_lq_apply_test_model")
    return ListQuery(**kwargs)


class ListQueryCoercionTests(unittest.TestCase):
    def test_boolean_words(self):
        self.assertTrue(coerce_column_value(_CoercionModel.bool_col, "true"))
        self.assertTrue(coerce_column_value(_CoercionModel.bool_col, "yes"))
        self.assertFalse(coerce_column_value(_CoercionModel.bool_col, "0"))
        self.assertFalse(coerce_column_value(_CoercionModel.bool_col, "off"))

    def test_boolean_invalid_value_raises_400(self):
        with self.assertRaises(ValidationError) as ctx:
            coerce_column_value(_CoercionModel.bool_col, "maybe")
        self.assertEqual(ctx.exception.status_code, 400)

    def test_numeric_strings_parse(self):
        self.assertEqual(coerce_column_value(_CoercionModel.int_col, "42"), 42)
        self.assertAlmostEqual(coerce_column_value(_CoercionModel.float_col, "3.14"), 3.14)
        self.assertEqual(coerce_column_value(_CoercionModel.numeric_col, "99.50"), Decimal("99.50"))

    def test_number_rejects_text(self):
        with self.assertRaises(ValidationError):
            coerce_column_value(_CoercionModel.int_col, "abc")

    def test_dates_accept_iso_date_and_datetime(self):
        self.assertEqual(coerce_column_value(_CoercionModel.date_col, "2026-02-26"), date(2026, 2, 26))
        self.assertEqual(
            coerce_column_value(_CoercionModel.date_col, "2026-02-26T13:45:00+03:00"),
            date(2026, 2, 26),
        )

    def test_datetime_accepts_date_only_and_makes_it_timezone_aware(self):
        value = coerce_column_value(_CoercionModel.dt_col, "2026-02-26")
        self.assertIsInstance(value, datetime)
        self.assertEqual(value.date(), date(2026, 2, 26))
        self.assertEqual(value.tzinfo, timezone.utc)

    def test_uuid_accepts_string(self):
        uid = uuid.uuid4()
        self.assertEqual(coerce_column_value(_CoercionModel.uuid_col, str(uid)), uid)

    def test_uuid_invalid_raises_400(self):
        with self.assertRaises(ValidationError) as ctx:
            coerce_column_value(_CoercionModel.uuid_col, "not-a-uuid")
        self.assertEqual(ctx.exception.status_code, 400)

    def test_text_column_keeps_string(self):
        self.assertEqual(coerce_column_value(_CoercionModel.text_col, "abc"), "abc")


class FilterClauseBuilderTests(unittest.TestCase):
    def test_clauses_follow_sorted_keys_and_search_comes_last(self):
        query = _query(
            search_term="  건담  ",
            searchable_fields=["title"],
            filters={"price": {"min": 100, "max": 200}, "grade": ["HG", "MG"], "id": 3},
        )
        clauses = build_filter_clauses(query, ["grade", "id", "price"])
        self.assertEqual(
            clauses,
            [
                InClause(field="grade", values=["HG", "MG"]),
                EqualsClause(field="id", value=3),
                RangeClause(field="price", min=100, max=200),
                TextSearchClause(fields=["title"], term="건담"),
            ],
        )

    def test_empty_filters_are_omitted(self):
        query = _query(
            search_term="   ",
            searchable_fields=["title"],
            filters={"grade": [], "title": "  ", "price": {"min": "", "max": None}, "id": None},
        )
        self.assertEqual(build_filter_clauses(query, ["grade", "title", "price", "id"]), [])

    def test_blank_items_inside_a_set_are_dropped(self):
        query = _query(filters={"grade": ["HG", "", None]})
        self.assertEqual(build_filter_clauses(query, ["grade"]), [InClause(field="grade", values=["HG"])])

    def test_unknown_filter_field_is_rejected(self):
        query = _query(filters={"secret": "x"})
        with self.assertRaises(InvalidFilterField) as ctx:
            build_filter_clauses(query, ["grade"])
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.field, "secret")
        self.assertIn('"secret"', ctx.exception.message)

    def test_sets_and_range_mappings_are_normalized(self):
        query = _query(filters={"grade": {"MG", "HG"}, "price": {"max": 5}})
        self.assertEqual(query.filters["grade"], ["HG", "MG"])
        self.assertIsInstance(query.filters["price"], RangeValue)
        self.assertIsNone(query.filters["price"].min)

    def test_search_without_searchable_fields_is_invalid(self):
        with self.assertRaises(SchemaValidationError):
            _query(search_term="zaku")

    def test_escape_like_neutralizes_wildcards(self):
        self.assertEqual(escape_like("100%_a\\"), "100\\%\\_a\\\\")


class ListQueryApplyTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.engine = create_engine("sqlite+pysqlite:///:memory:")
        _ApplyBase.metadata.create_all(cls.engine)
        with Session(cls.engine) as session:
            session.add_all(
                [
                    _ListingRow(id=1, title="prev-day", price=300, grade="HG", created_at=datetime(2026, 2, 25, 23, 59, 59)),
                    _ListingRow(id=2, title="same-day-morning", price=100, grade="MG", created_at=datetime(2026, 2, 26, 9, 30, 0)),
                    _ListingRow(id=3, title="same-day-evening", price=100, grade="HG", created_at=datetime(2026, 2, 26, 23, 59, 59)),
                    _ListingRow(id=4, title="next-day", price=200, grade="RG", created_at=datetime(2026, 2, 27, 0, 0, 0)),
                    _ListingRow(id=5, title="100% sale", price=50, grade="HG", created_at=datetime(2026, 2, 28, 0, 0, 0)),
                ]
            )
            session.commit()

    @classmethod
    def tearDownClass(cls):
        cls.engine.dispose()

    def _run(self, query: ListQuery, **kwargs):
        kwargs.setdefault("filterable_fields", ["created_at", "grade", "price", "title"])
        with Session(self.engine) as session:
            result = run_list_query(session, _ListingRow, query, **kwargs)
            return result.map(lambda row: row.id)

    def test_datetime_equal_date_uses_day_range(self):
        result = self._run(_query(filters={"created_at": "2026-02-26"}, sort_field="id", sort_descending=False))
        self.assertEqual(result.rows, [2, 3])

    def test_datetime_equal_full_timestamp_stays_exact(self):
        result = self._run(_query(filters={"created_at": "2026-02-26T09:30:00"}))
        self.assertEqual(result.rows, [2])

    def test_set_and_range_filters_combine(self):
        result = self._run(
            _query(filters={"grade": ["HG", "RG"], "price": {"min": 100, "max": 250}}, sort_field="id", sort_descending=False)
        )
        self.assertEqual(result.rows, [3, 4])
        self.assertEqual(result.total_count, 2)

    def test_sort_ties_keep_primary_key_order(self):
        result = self._run(_query(sort_field="price", sort_descending=False))
        self.assertEqual(result.rows, [5, 2, 3, 4, 1])

    def test_search_treats_percent_literally(self):
        result = self._run(_query(search_term="100%", searchable_fields=["title"]))
        self.assertEqual(result.rows, [5])

    def test_search_is_case_insensitive(self):
        result = self._run(_query(search_term="SAME-DAY", searchable_fields=["title"], sort_field="id", sort_descending=False))
        self.assertEqual(result.rows, [2, 3])

    def test_page_counts_and_window(self):
        result = self._run(_query(sort_field="id", sort_descending=False, page=2, page_size=2))
        self.assertEqual(result.rows, [3, 4])
        self.assertEqual(result.total_count, 5)
        self.assertEqual(result.total_pages, 3)

    def test_page_past_end_returns_no_rows(self):
        result = self._run(_query(page=9, page_size=2))
        self.assertEqual(result.rows, [])
        self.assertEqual(result.total_count, 5)

    def test_unknown_sort_field_is_rejected(self):
        with self.assertRaises(ValidationError):
            self._run(_query(sort_field="missing"))

    def test_sort_field_outside_allowed_list_is_rejected(self):
        with self.assertRaises(ValidationError):
            self._run(_query(sort_field="title"), sortable_fields=["price"])


if __name__ == "__main__":
    unittest.main()
