"""
Tests for the query engine: free-text and field filters.
"""
import pytest

from errorcode_viewer.core import (
    FlatTable,
    QueryState,
    SourceFormat,
    build_search_params,
    filter_records,
    filter_rows,
    parse_source,
)


class TestFlatFilter:
    """Tests for filter_rows on flat tables."""

    def setup_method(self):
        """Set up test fixtures."""
        self.columns = ["code", "title", "count"]
        self.records = [
            {"code": "F0001", "title": "Fallo de Precarga", "count": 3},
            {"code": "F0002", "title": "Sobrecalentamiento IGBT", "count": 42},
            {"code": "ERR12", "title": "Error de Comunicación", "count": 7},
        ]
        self.table = FlatTable.from_records(self.columns, self.records)

    def test_empty_needle_matches_all(self):
        assert filter_rows(self.table, QueryState()) == self.records
        assert filter_rows(self.table, QueryState(free_text="   ")) == self.records

    def test_substring_case_insensitive(self):
        result = filter_rows(self.table, QueryState(free_text="PRECARGA"))
        assert [row["code"] for row in result] == ["F0001"]

        result = filter_rows(self.table, QueryState(free_text="f000"))
        assert [row["code"] for row in result] == ["F0001", "F0002"]

    def test_non_ascii_needle(self):
        result = filter_rows(self.table, QueryState(free_text="comunicación"))
        assert [row["code"] for row in result] == ["ERR12"]

    def test_numeric_cells_searched_as_text(self):
        result = filter_rows(self.table, QueryState(free_text="42"))
        assert [row["code"] for row in result] == ["F0002"]

    def test_no_match_is_empty(self):
        assert filter_rows(self.table, QueryState(free_text="zzz")) == []

    def test_every_result_contains_needle(self):
        needle = "de"
        for row in filter_rows(self.table, QueryState(free_text=needle)):
            assert any(needle in str(value).casefold() for value in row.values())

    def test_idempotent(self):
        query = QueryState(free_text="f", field_filters={"title": "o"})
        once = filter_rows(self.table, query)
        twice = filter_rows(FlatTable.from_records(self.columns, once), query)

        assert twice == once

    def test_field_filters_are_anded(self):
        query = QueryState(field_filters={"code": "f", "title": "sobre"})
        result = filter_rows(self.table, query)

        assert [row["code"] for row in result] == ["F0002"]

    def test_empty_field_filter_is_noop(self):
        query = QueryState(field_filters={"code": "", "title": "  "})
        assert filter_rows(self.table, query) == self.records

    def test_unknown_field_counts_as_blank(self):
        assert filter_rows(self.table, QueryState(field_filters={"brand": "x"})) == []
        assert filter_rows(self.table, QueryState(field_filters={"brand": ""})) == self.records

    def test_free_text_and_fields_combined(self):
        query = QueryState(free_text="de", field_filters={"code": "err"})
        result = filter_rows(self.table, query)

        assert [row["code"] for row in result] == ["ERR12"]

    def test_source_order_preserved(self):
        result = filter_rows(self.table, QueryState(free_text="e"))
        codes = [row["code"] for row in result]

        assert codes == [r["code"] for r in self.records if r["code"] in codes]

    def test_empty_table(self):
        table = FlatTable.from_records(["a"], [])
        assert filter_rows(table, QueryState(free_text="x")) == []


class TestTreeFilter:
    """Tests for filter_rows on XML trees."""

    def setup_method(self):
        """Set up test fixtures."""
        self.table = parse_source(
            b'<root>'
            b'<item id="1">Hello<sub kind="a">x</sub>world</item>'
            b'<item id="2"/>'
            b'</root>',
            SourceFormat.XML
        )

    def test_matches_name_and_path(self):
        result = filter_rows(self.table, QueryState(free_text="SUB"))
        assert [(row.depth, row.node.name) for row in result] == [(1, "sub")]

    def test_matches_value(self):
        result = filter_rows(self.table, QueryState(free_text="world"))
        assert [row.node.attributes.get("id") for row in result] == ["1"]

    def test_matches_attributes(self):
        result = filter_rows(self.table, QueryState(free_text="kind"))
        assert [row.node.name for row in result] == ["sub"]

    def test_empty_needle_gives_all_rows(self):
        assert len(filter_rows(self.table, QueryState())) == 3

    def test_field_filter_on_attribute(self):
        result = filter_rows(self.table, QueryState(field_filters={"id": "2"}))
        assert len(result) == 1
        assert result[0].node.attributes == {"id": "2"}


class TestRecordFilter:
    """Tests for filter_records on error records."""

    def test_brand_filter(self, sample_records):
        result = filter_records(sample_records, QueryState(field_filters={"brand": "Schneider"}))
        assert [r.id for r in result] == [1, 2]

    def test_code_and_model_anded(self, sample_records):
        query = QueryState(field_filters={"model": "atv320", "errorCode": "0002"})
        assert [r.id for r in filter_records(sample_records, query)] == [2]

    def test_free_text_searches_causes(self, sample_records):
        result = filter_records(sample_records, QueryState(free_text="ventilador"))
        assert [r.id for r in result] == [2]

    def test_free_text_searches_description(self, sample_records):
        result = filter_records(sample_records, QueryState(free_text="BATERÍA DE RESPALDO"))
        assert [r.id for r in result] == [11]

    def test_empty_query_keeps_order(self, sample_records):
        assert filter_records(sample_records, QueryState()) == sample_records


class TestSearchParams:
    """Tests for the remote search query string."""

    def test_fields_lowercased_and_trimmed(self):
        query = QueryState(
            free_text="  Precarga ",
            field_filters={"brand": " Schneider ", "model": "", "errorCode": "F0001"}
        )

        assert build_search_params(query) == {
            "brand": "schneider",
            "errorCode": "f0001",
            "q": "Precarga",
        }

    def test_empty_query(self):
        assert build_search_params(QueryState()) == {}

    @pytest.mark.parametrize("text", ["", "   "])
    def test_blank_free_text_omitted(self, text):
        params = build_search_params(QueryState(free_text=text, field_filters={"brand": "abb"}))
        assert params == {"brand": "abb"}
