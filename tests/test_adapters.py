"""
Tests for the format adapters.
"""
import codecs

import pytest

from errorcode_viewer.core import (
    FileReader,
    FlatTable,
    MalformedSourceError,
    SourceFile,
    SourceFormat,
    TreeTable,
    UnsupportedFormatError,
    detect_format,
    parse_source,
)


class TestFormatDetection:
    """Tests for suffix-based format detection."""

    def test_known_suffixes(self):
        assert detect_format("codes.csv") == SourceFormat.CSV
        assert detect_format("codes.json") == SourceFormat.JSON
        assert detect_format("codes.xml") == SourceFormat.XML
        assert detect_format("codes.xlsx") == SourceFormat.SPREADSHEET
        assert detect_format("codes.xls") == SourceFormat.SPREADSHEET

    def test_suffix_is_case_insensitive(self):
        assert detect_format("CODES.CSV") == SourceFormat.CSV
        assert detect_format("Codes.Xlsx") == SourceFormat.SPREADSHEET

    def test_unknown_suffix(self):
        assert detect_format("notes.txt") == SourceFormat.UNKNOWN
        assert detect_format("no_suffix") == SourceFormat.UNKNOWN

    def test_unknown_format_rejected(self):
        """Parsing under an unknown format raises UnsupportedFormatError."""
        with pytest.raises(UnsupportedFormatError):
            FileReader().parse(SourceFile(name="notes.txt", content=b"a,b\n1,2"))

        with pytest.raises(UnsupportedFormatError):
            parse_source(b"a: 1", "yaml")

        with pytest.raises(UnsupportedFormatError):
            parse_source(b"a,b", SourceFormat.UNKNOWN)

    def test_declared_format_by_name(self):
        table = parse_source("a,b\n1,2\n", "csv")
        assert isinstance(table, FlatTable)


class TestCsvAdapter:
    """Tests for the CSV adapter."""

    def test_header_and_rows(self):
        """First line is the header; blank lines are skipped."""
        table = parse_source("Code,Title\nF1,Fallo\n\nF2,Sobre\n", SourceFormat.CSV)

        assert table.columns == ["Code", "Title"]
        assert table.rows == [
            {"Code": "F1", "Title": "Fallo"},
            {"Code": "F2", "Title": "Sobre"},
        ]

    def test_cells_and_headers_trimmed(self):
        table = parse_source(" Code , Title \n F1 ,  Fallo  \n", SourceFormat.CSV)

        assert table.columns == ["Code", "Title"]
        assert table.rows == [{"Code": "F1", "Title": "Fallo"}]

    def test_short_rows_padded(self):
        table = parse_source("a,b,c\n1,2\n", SourceFormat.CSV)

        assert table.rows == [{"a": "1", "b": "2", "c": ""}]

    def test_extra_fields_dropped(self):
        table = parse_source("a,b\n1,2,3\n4,5\n", SourceFormat.CSV)

        assert table.columns == ["a", "b"]
        assert table.rows == [{"a": "1", "b": "2"}, {"a": "4", "b": "5"}]

    def test_quoted_commas_kept(self):
        table = parse_source('Code,Title\nF1,"Fallo, grave"\n', SourceFormat.CSV)

        assert table.rows == [{"Code": "F1", "Title": "Fallo, grave"}]

    def test_separator_only_lines_are_rows(self):
        """A line of bare commas is not blank, so it becomes an all-blank row."""
        table = parse_source("a,b\n,\n1,2\n", SourceFormat.CSV)

        assert table.rows == [{"a": "", "b": ""}, {"a": "1", "b": "2"}]

    def test_whitespace_only_lines_skipped(self):
        table = parse_source("a,b\n   \n1,2\n\t\n", SourceFormat.CSV)

        assert table.rows == [{"a": "1", "b": "2"}]

    def test_blank_header_cells_kept(self):
        table = parse_source("a,,b\n1,2,3\n", SourceFormat.CSV)

        assert table.columns == ["a", "", "b"]
        assert table.rows == [{"a": "1", "": "2", "b": "3"}]

    def test_duplicate_headers_made_unique(self):
        table = parse_source("code,code\nF1,F2\n", SourceFormat.CSV)

        assert table.columns == ["code", "code.1"]

    def test_header_only(self):
        table = parse_source("a,b\n", SourceFormat.CSV)

        assert table.columns == ["a", "b"]
        assert table.row_count == 0

    def test_empty_input_rejected(self):
        with pytest.raises(MalformedSourceError):
            parse_source("", SourceFormat.CSV)

        with pytest.raises(MalformedSourceError):
            parse_source("   \n  \n", SourceFormat.CSV)

    def test_utf8_bom_stripped(self):
        content = codecs.BOM_UTF8 + "Código,Título\nF1,Fallo\n".encode("utf-8")
        table = parse_source(content, SourceFormat.CSV)

        assert table.columns == ["Código", "Título"]

    def test_utf16_decoded(self):
        content = codecs.BOM_UTF16_LE + "a,b\n1,2\n".encode("utf-16-le")
        table = parse_source(content, SourceFormat.CSV)

        assert table.rows == [{"a": "1", "b": "2"}]

    def test_latin1_fallback(self):
        table = parse_source("name\ncaf\xe9\n".encode("cp1252"), SourceFormat.CSV)

        assert table.rows == [{"name": "café"}]

    def test_fresh_table_each_parse(self):
        """Adapters return a fresh table and never share state."""
        first = parse_source("a\n1\n", SourceFormat.CSV)
        second = parse_source("a\n1\n", SourceFormat.CSV)

        assert first is not second
        assert first.dataframe is not second.dataframe


class TestJsonAdapter:
    """Tests for the JSON adapter."""

    def test_columns_from_first_object(self):
        """Missing keys become '', keys outside the column set are dropped."""
        table = parse_source('[{"a": 1, "b": null}, {"a": 2, "c": 3}]', SourceFormat.JSON)

        assert table.columns == ["a", "b"]
        assert table.rows == [{"a": 1, "b": ""}, {"a": 2, "b": ""}]

    def test_nested_values_serialized(self):
        table = parse_source(
            '[{"code": "F1", "causes": ["x", "y"], "meta": {"n": 1}, "active": true}]',
            SourceFormat.JSON
        )

        row = table.rows[0]
        assert row["causes"] == '["x", "y"]'
        assert row["meta"] == '{"n": 1}'
        assert row["active"] == "true"

    def test_non_ascii_kept(self):
        table = parse_source('[{"tags": ["Crítico"]}]', SourceFormat.JSON)

        assert table.rows[0]["tags"] == '["Crítico"]'

    @pytest.mark.parametrize("content", [
        "not json",
        "{}",
        '{"a": 1}',
        "[]",
        "[1, 2]",
        '[{"a": 1}, 2]',
        '[{}, {"a": 1}]',
    ])
    def test_malformed(self, content):
        with pytest.raises(MalformedSourceError):
            parse_source(content, SourceFormat.JSON)


class TestXmlAdapter:
    """Tests for the XML adapter."""

    def setup_method(self):
        """Set up test fixtures."""
        self.content = (
            b'<root>'
            b'<item id="1">Hello<sub kind="a">x</sub>world</item>'
            b'<item id="2"/>'
            b'</root>'
        )

    def test_root_is_not_a_row(self):
        table = parse_source(self.content, SourceFormat.XML)

        assert isinstance(table, TreeTable)
        assert [node.name for node in table.nodes] == ["item", "item"]

    def test_text_attributes_and_children(self):
        table = parse_source(self.content, SourceFormat.XML)
        item = table.nodes[0]

        assert item.value == "Hello | world"
        assert item.attributes == {"id": "1"}
        assert item.depth == 0
        assert len(item.children) == 1

        sub = item.children[0]
        assert sub.name == "sub"
        assert sub.path == "item > sub"
        assert sub.value == "x"
        assert sub.depth == 1

    def test_pre_order_rows(self):
        table = parse_source(self.content, SourceFormat.XML)

        rows = table.rows
        assert [(row.depth, row.node.name) for row in rows] == [
            (0, "item"), (1, "sub"), (0, "item")
        ]
        assert table.row_count == 3
        assert table.columns == ["Element", "Attributes", "Value"]

    def test_empty_element(self):
        table = parse_source(self.content, SourceFormat.XML)

        assert table.nodes[1].value == ""
        assert table.nodes[1].children == []

    def test_malformed(self):
        with pytest.raises(MalformedSourceError):
            parse_source(b"<root><a></root>", SourceFormat.XML)


class TestSpreadsheetAdapter:
    """Tests for the spreadsheet adapter."""

    def test_first_row_is_header(self, make_workbook):
        content = make_workbook([
            ["Code", "Title"],
            ["F1", "Fallo"],
            ["F2", "Sobre"],
        ])

        table = parse_source(content, SourceFormat.SPREADSHEET)

        assert table.columns == ["Code", "Title"]
        assert table.rows == [
            {"Code": "F1", "Title": "Fallo"},
            {"Code": "F2", "Title": "Sobre"},
        ]

    def test_blank_rows_skipped(self, make_workbook):
        content = make_workbook([
            ["Code", "Count"],
            ["F1", 3],
            [None, None],
            ["F2", 5],
        ])

        table = parse_source(content, SourceFormat.SPREADSHEET)

        assert table.row_count == 2
        assert [row["Code"] for row in table.rows] == ["F1", "F2"]
        assert table.rows[0]["Count"] == 3

    def test_missing_cells_are_blank(self, make_workbook):
        content = make_workbook([
            ["Code", "Title"],
            ["F1", None],
        ])

        table = parse_source(content, SourceFormat.SPREADSHEET)

        assert table.rows == [{"Code": "F1", "Title": ""}]

    def test_duplicate_headers_made_unique(self, make_workbook):
        content = make_workbook([
            ["Code", "Code"],
            ["F1", "F2"],
        ])

        table = parse_source(content, SourceFormat.SPREADSHEET)

        assert table.columns == ["Code", "Code.1"]

    def test_cells_past_header_width_ignored(self, make_workbook):
        """A row with values only beyond the last header column is blank."""
        content = make_workbook([
            ["a", "b", None],
            ["1", "2", None],
            [None, None, "x"],
        ])

        table = parse_source(content, SourceFormat.SPREADSHEET)

        assert table.columns == ["a", "b"]
        assert table.rows == [{"a": "1", "b": "2"}]

    def test_header_only_rejected(self, make_workbook):
        content = make_workbook([["Code", "Title"]])

        with pytest.raises(MalformedSourceError):
            parse_source(content, SourceFormat.SPREADSHEET)

    def test_garbage_bytes_rejected(self):
        with pytest.raises(MalformedSourceError):
            parse_source(b"this is not a workbook", SourceFormat.SPREADSHEET)
