"""
File IO and format adapters for the Error Code Viewer application.

Every adapter turns one raw source into a fresh Table:
CSV, JSON and spreadsheet sources become a FlatTable, XML becomes a TreeTable.
"""
from __future__ import annotations

import codecs
import datetime as dt
import io
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Iterable, Optional, Union
from xml.etree import ElementTree as ET

import numpy as np
import pandas as pd

from .exceptions import (
    MalformedSourceError,
    SourceUnavailableError,
    UnsupportedFormatError,
    ViewerError,
)
from .models import (
    ErrorRecord,
    FlatTable,
    LoadedFile,
    SourceFile,
    SourceFormat,
    Table,
    TreeNode,
    TreeTable,
)

logger = logging.getLogger(__name__)

# Separator between sibling text nodes of one XML element
XML_TEXT_SEPARATOR = " | "

# Separator between ancestors in an XML node path
XML_PATH_SEPARATOR = " > "

# Column set used for an empty REST result
RECORD_COLUMNS = list(ErrorRecord().to_dict().keys())


def detect_format(filename: str) -> SourceFormat:
    """Infer the source format from a filename suffix."""
    return SourceFormat.from_filename(filename)


def _coerce_format(declared_format: Union[SourceFormat, str]) -> SourceFormat:
    """Resolve a declared format, rejecting anything the adapters don't handle."""
    if isinstance(declared_format, SourceFormat):
        fmt = declared_format
    else:
        try:
            fmt = SourceFormat(str(declared_format).lower())
        except ValueError:
            raise UnsupportedFormatError(declared_format) from None

    if fmt == SourceFormat.UNKNOWN:
        raise UnsupportedFormatError(fmt.value)
    return fmt


def _unique_columns(names: Iterable[str]) -> list[str]:
    """Make column names unique by suffixing repeats with .1, .2, ..."""
    seen: dict[str, int] = {}
    result = []
    for name in names:
        if name in seen:
            seen[name] += 1
            candidate = f"{name}.{seen[name]}"
            while candidate in seen:
                seen[name] += 1
                candidate = f"{name}.{seen[name]}"
            seen[candidate] = 0
            result.append(candidate)
        else:
            seen[name] = 0
            result.append(name)
    return result


def _display_value(value: Any) -> Any:
    """Normalize a JSON value for display: scalars stay, structures become text."""
    if value is None:
        return ""
    if isinstance(value, (dict, list, bool)):
        return json.dumps(value, ensure_ascii=False)
    return value


def _cell_value(value: Any) -> Any:
    """Normalize a spreadsheet cell: numbers stay numbers, blanks become ''."""
    if value is None:
        return ""
    if isinstance(value, float) and np.isnan(value):
        return ""
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, (dt.datetime, dt.date, pd.Timestamp)):
        return value.isoformat()
    return str(value)


def _header_text(value: Any) -> str:
    """Header cells are always text; integral floats drop the '.0'."""
    value = _cell_value(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _local_name(tag: str) -> str:
    """Strip an ElementTree '{namespace}' prefix from a tag."""
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def table_from_objects(items: list[dict[str, Any]]) -> FlatTable:
    """
    Build a FlatTable from a list of objects.

    The column set is the key set of the first object; every other object
    is reconciled against it.
    """
    columns = [str(key) for key in items[0].keys()]
    records = [
        {col: _display_value(item.get(col)) for col in columns}
        for item in items
    ]
    return FlatTable.from_records(columns, records)


def records_to_table(records: list[Union[ErrorRecord, dict[str, Any]]]) -> FlatTable:
    """Treat a REST response body like JSON adapter output."""
    items = [r.to_dict() if isinstance(r, ErrorRecord) else r for r in records]
    if not items:
        return FlatTable.from_records(RECORD_COLUMNS, [])
    return table_from_objects(items)


class FileReader:
    """Reads raw sources and converts them into Tables."""

    def __init__(self, encodings: Optional[list[str]] = None):
        self.encodings = encodings or ["utf-8-sig", "cp1252", "latin-1"]

    def decode(self, content: Union[bytes, str]) -> str:
        """Decode raw bytes, honouring a UTF-16 BOM, else trying each encoding."""
        if isinstance(content, str):
            return content

        if content.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
            try:
                return content.decode("utf-16")
            except UnicodeDecodeError as exc:
                raise MalformedSourceError(f"Invalid UTF-16 text: {exc}") from exc

        for enc in self.encodings:
            try:
                return content.decode(enc)
            except (UnicodeDecodeError, UnicodeError):
                continue

        raise MalformedSourceError("Could not decode source text")

    def read_file(self, filepath: Path | str) -> SourceFile:
        """Read a file from disk into a SourceFile."""
        filepath = Path(filepath)

        try:
            content = filepath.read_bytes()
        except OSError as exc:
            raise SourceUnavailableError(f"Cannot read {filepath}: {exc}") from exc

        return SourceFile(name=filepath.name, content=content)

    def parse(self, source: SourceFile) -> Table:
        """Parse a SourceFile using the format implied by its name."""
        if source.format == SourceFormat.UNKNOWN:
            raise UnsupportedFormatError(SourceFormat.UNKNOWN.value, source.name)
        return self.parse_content(source.content, source.format)

    def parse_content(
        self,
        content: Union[bytes, str],
        declared_format: Union[SourceFormat, str]
    ) -> Table:
        """Parse raw content under its declared format."""
        fmt = _coerce_format(declared_format)
        logger.debug("Parsing %s source (%d bytes)", fmt.value, len(content))

        if fmt == SourceFormat.CSV:
            return self._parse_csv(self.decode(content))
        elif fmt == SourceFormat.JSON:
            return self._parse_json(self.decode(content))
        elif fmt == SourceFormat.XML:
            return self._parse_xml(content)
        else:
            return self._parse_spreadsheet(content)

    def load(self, source: SourceFile) -> LoadedFile:
        """Parse one source, recording the outcome instead of raising."""
        fmt = source.format
        try:
            table = self.parse(source)
        except ViewerError as exc:
            logger.warning("Failed to load %s: %s", source.name, exc)
            return LoadedFile(name=source.name, format=fmt, error=str(exc))

        return LoadedFile(name=source.name, format=fmt, table=table)

    def load_path(self, filepath: Path | str) -> LoadedFile:
        """Read and parse one file, recording a read failure in its slot."""
        filepath = Path(filepath)
        try:
            source = self.read_file(filepath)
        except SourceUnavailableError as exc:
            logger.warning("Failed to read %s: %s", filepath, exc)
            return LoadedFile(
                name=filepath.name,
                format=detect_format(filepath.name),
                error=str(exc)
            )
        return self.load(source)

    def _parse_csv(self, text: str) -> FlatTable:
        """First non-blank line is the header; every later non-blank line is a row."""
        text = "\n".join(line for line in text.splitlines() if line.strip())
        if not text:
            raise MalformedSourceError("CSV source has no lines")

        options = dict(
            header=None,
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            index_col=False,
        )
        try:
            width = len(pd.read_csv(io.StringIO(text), nrows=1, **options).columns)
            # usecols keeps the header width: longer rows lose trailing fields
            df = pd.read_csv(io.StringIO(text), usecols=list(range(width)), **options)
        except (pd.errors.EmptyDataError, pd.errors.ParserError, ValueError) as exc:
            raise MalformedSourceError(f"CSV parse error: {exc}") from exc

        df = df.fillna("")
        for col in df.columns:
            df[col] = df[col].astype(str).str.strip()

        columns = _unique_columns(
            cell.lstrip("\ufeff").strip() for cell in df.iloc[0].tolist()
        )
        body = df.iloc[1:].reset_index(drop=True)
        body.columns = columns

        return FlatTable(columns=columns, dataframe=body.astype(object))

    def _parse_json(self, text: str) -> FlatTable:
        """A non-empty array of objects; keys of the first give the columns."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedSourceError(f"JSON parse error: {exc}") from exc

        if not isinstance(data, list) or not data:
            raise MalformedSourceError("JSON source must be a non-empty array of objects")
        if not all(isinstance(item, dict) for item in data):
            raise MalformedSourceError("Every JSON array element must be an object")
        if not data[0]:
            raise MalformedSourceError("The first JSON object has no keys to use as columns")

        return table_from_objects(data)

    def _parse_xml(self, content: Union[bytes, str]) -> TreeTable:
        """Children of the document element become the top-level nodes."""
        try:
            root = ET.fromstring(content)
        except ET.ParseError as exc:
            raise MalformedSourceError(f"XML parse error: {exc}") from exc

        nodes = [self._xml_node(child, [], 0) for child in root]
        return TreeTable(nodes=nodes)

    def _xml_node(self, element: ET.Element, ancestors: list[str], depth: int) -> TreeNode:
        """Capture an element's direct text and attributes, then recurse."""
        name = _local_name(element.tag)
        path = ancestors + [name]

        texts = [element.text] + [child.tail for child in element]
        value = XML_TEXT_SEPARATOR.join(
            t.strip() for t in texts if t is not None and t.strip()
        )

        node = TreeNode(
            name=name,
            path=XML_PATH_SEPARATOR.join(path),
            value=value,
            attributes={_local_name(k): v for k, v in element.attrib.items()},
            depth=depth
        )
        node.children = [self._xml_node(child, path, depth + 1) for child in element]
        return node

    def _parse_spreadsheet(self, content: Union[bytes, str]) -> FlatTable:
        """First sheet only; first row is the header; blank rows are skipped."""
        if isinstance(content, str):
            raise MalformedSourceError("Spreadsheet source must be binary content")

        try:
            df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, dtype=object)
        except Exception as exc:  # noqa: BLE001
            # openpyxl/xlrd/zipfile raise their own error types for bad workbooks
            raise MalformedSourceError(f"Spreadsheet parse error: {exc}") from exc

        rows = [
            [_cell_value(cell) for cell in row]
            for row in df.astype(object).where(df.notna(), None).values.tolist()
        ]
        rows = [row for row in rows if any(cell != "" for cell in row)]
        if not rows:
            raise MalformedSourceError("Spreadsheet does not contain enough rows")

        header = rows[0]
        while header and header[-1] == "":
            header = header[:-1]
        columns = _unique_columns(_header_text(cell) for cell in header)

        # Cells past the header width are dropped before the blank-row check
        width = len(columns)
        records = [
            dict(zip(columns, row[:width]))
            for row in rows[1:]
            if any(cell != "" for cell in row[:width])
        ]
        if not records:
            raise MalformedSourceError("Spreadsheet does not contain enough rows")

        return FlatTable.from_records(columns, records)


def parse_source(
    content: Union[bytes, str],
    declared_format: Union[SourceFormat, str]
) -> Table:
    """Parse raw content under its declared format with a default reader."""
    return FileReader().parse_content(content, declared_format)


def load_files(
    sources: list[SourceFile],
    reader: Optional[FileReader] = None,
    max_workers: int = 4
) -> list[LoadedFile]:
    """
    Parse several sources as independent tasks and join their outcomes.

    Args:
        sources: Files submitted together
        reader: Reader to use (a default one if omitted)
        max_workers: Upper bound on parallel parse tasks

    Returns:
        One LoadedFile per source, in submission order
    """
    if not sources:
        return []

    reader = reader or FileReader()
    workers = max(1, min(max_workers, len(sources)))

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(reader.load, sources))

    failed = sum(1 for r in results if not r.ok)
    logger.info("Loaded %d file(s), %d failed", len(results), failed)
    return results


def load_paths(
    paths: list[Path | str],
    reader: Optional[FileReader] = None,
    max_workers: int = 4
) -> list[LoadedFile]:
    """Like load_files, but each task also reads its file from disk."""
    if not paths:
        return []

    reader = reader or FileReader()
    workers = max(1, min(max_workers, len(paths)))

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(reader.load_path, paths))

    failed = sum(1 for r in results if not r.ok)
    logger.info("Loaded %d file(s) from disk, %d failed", len(results), failed)
    return results
