"""
Core data models for the Error Code Viewer application.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Any, Iterator, Optional, Union

import pandas as pd


class SourceFormat(Enum):
    """Formats understood by the adapters."""
    CSV = "csv"
    JSON = "json"
    XML = "xml"
    SPREADSHEET = "spreadsheet"
    UNKNOWN = "unknown"

    @classmethod
    def from_filename(cls, filename: str) -> SourceFormat:
        """Infer the format from a filename suffix."""
        suffix = PurePath(filename).suffix.lower()
        return SUFFIX_FORMATS.get(suffix, cls.UNKNOWN)


SUFFIX_FORMATS = {
    ".csv": SourceFormat.CSV,
    ".json": SourceFormat.JSON,
    ".xml": SourceFormat.XML,
    ".xlsx": SourceFormat.SPREADSHEET,
    ".xls": SourceFormat.SPREADSHEET,
}


class Severity(Enum):
    """Severity levels stored on error records."""
    BAJO = "bajo"
    MEDIO = "medio"
    ALTO = "alto"
    CRITICO = "crítico"


@dataclass
class FlatTable:
    """Column set plus rows, reconciled so every row has every column."""
    columns: list[str] = field(default_factory=list)
    dataframe: pd.DataFrame = field(default_factory=pd.DataFrame)

    @classmethod
    def from_records(
        cls,
        columns: list[str],
        records: list[dict[str, Any]]
    ) -> FlatTable:
        """Build a table from row mappings, filling missing cells with ''."""
        rows = [[record.get(col, "") for col in columns] for record in records]
        df = pd.DataFrame(rows, columns=columns, dtype=object)
        return cls(columns=list(columns), dataframe=df)

    @property
    def rows(self) -> list[dict[str, Any]]:
        """Rows as mappings, in source order."""
        return self.dataframe.to_dict("records")

    @property
    def row_count(self) -> int:
        return len(self.dataframe)

    @property
    def is_tree(self) -> bool:
        return False


@dataclass
class TreeNode:
    """One XML element with its direct text and attributes."""
    name: str
    path: str
    value: str = ""
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[TreeNode] = field(default_factory=list)
    depth: int = 0

    def search_values(self) -> list[str]:
        """Text used by the free-text filter."""
        values = [self.name, self.value, self.path]
        for attr_name, attr_value in self.attributes.items():
            values.append(attr_name)
            values.append(attr_value)
        return values


@dataclass(frozen=True)
class TreeRow:
    """A node in a flattened tree, with its nesting depth."""
    depth: int
    node: TreeNode


@dataclass
class TreeTable:
    """Tree-shaped table produced by the XML adapter."""
    nodes: list[TreeNode] = field(default_factory=list)

    columns = ["Element", "Attributes", "Value"]

    def iter_rows(self) -> Iterator[TreeRow]:
        """Depth-first, pre-order walk of all nodes."""
        stack = [(node, 0) for node in reversed(self.nodes)]
        while stack:
            node, depth = stack.pop()
            yield TreeRow(depth=depth, node=node)
            for child in reversed(node.children):
                stack.append((child, depth + 1))

    @property
    def rows(self) -> list[TreeRow]:
        return list(self.iter_rows())

    @property
    def row_count(self) -> int:
        return sum(1 for _ in self.iter_rows())

    @property
    def is_tree(self) -> bool:
        return True


Table = Union[FlatTable, TreeTable]


@dataclass
class QueryState:
    """Free-text and per-field filters for the current surface."""
    free_text: str = ""
    field_filters: dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True when no filter restricts the rows."""
        if self.free_text.strip():
            return False
        return not any(value.strip() for value in self.field_filters.values())


@dataclass(frozen=True)
class PageState:
    """Current page (1-based) and page size."""
    current_page: int = 1
    page_size: int = 10

    def __post_init__(self):
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")

    def page_count(self, row_count: int) -> int:
        """Number of pages for a row count; never less than one."""
        return max(1, math.ceil(row_count / self.page_size))

    def clamped(self, row_count: int) -> PageState:
        """Return a copy with current_page clamped for row_count rows."""
        page = min(max(1, self.current_page), self.page_count(row_count))
        if page == self.current_page:
            return self
        return PageState(current_page=page, page_size=self.page_size)


@dataclass
class ManualLink:
    """A link to a manual or guide."""
    text: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "url": self.url}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ManualLink:
        return cls(text=data.get("text", ""), url=data.get("url", ""))


# Fields the edit form refuses to save blank
REQUIRED_RECORD_FIELDS = [
    "brand",
    "model",
    "errorCode",
    "title",
    "description",
    "causes",
    "solutions",
]


@dataclass
class ErrorRecord:
    """A single brand/model error code with causes and remedies."""
    id: Optional[int] = None
    brand: str = ""
    brand_name: str = ""
    model: str = ""
    error_code: str = ""
    title: str = ""
    description: str = ""
    causes: list[str] = field(default_factory=list)
    solutions: list[str] = field(default_factory=list)
    severity: str = ""
    diagram: Optional[str] = None
    manual_links: list[ManualLink] = field(default_factory=list)

    # Server bookkeeping, passed through untouched
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the wire format used by the REST API."""
        data = {
            "id": self.id,
            "brand": self.brand,
            "brandName": self.brand_name,
            "model": self.model,
            "errorCode": self.error_code,
            "title": self.title,
            "description": self.description,
            "causes": list(self.causes),
            "solutions": list(self.solutions),
            "severity": self.severity,
            "diagram": self.diagram,
            "manualLinks": [link.to_dict() for link in self.manual_links]
        }
        if self.created_at is not None:
            data["createdAt"] = self.created_at
        if self.updated_at is not None:
            data["updatedAt"] = self.updated_at
        return data

    def to_payload(self) -> dict[str, Any]:
        """Body for create/update requests (server assigns id and dates)."""
        data = self.to_dict()
        for key in ("id", "createdAt", "updatedAt"):
            data.pop(key, None)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ErrorRecord:
        """Deserialize from the wire format."""
        return cls(
            id=data.get("id"),
            brand=data.get("brand") or "",
            brand_name=data.get("brandName") or "",
            model=data.get("model") or "",
            error_code=data.get("errorCode") or "",
            title=data.get("title") or "",
            description=data.get("description") or "",
            causes=list(data.get("causes") or []),
            solutions=list(data.get("solutions") or []),
            severity=data.get("severity") or "",
            diagram=data.get("diagram") or None,
            manual_links=[
                ManualLink.from_dict(link) for link in data.get("manualLinks") or []
            ],
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt")
        )

    def field_value(self, key: str) -> str:
        """Text value of a wire field, for filtering."""
        value = self.to_dict().get(key)
        if value is None:
            return ""
        if isinstance(value, list):
            return " ".join(str(v) for v in value)
        return str(value)

    def missing_fields(self) -> list[str]:
        """Required wire fields that are blank."""
        missing = []
        for key in REQUIRED_RECORD_FIELDS:
            value = self.to_dict()[key]
            if isinstance(value, list):
                if not any(str(v).strip() for v in value):
                    missing.append(key)
            elif not str(value or "").strip():
                missing.append(key)
        return missing


@dataclass
class SourceFile:
    """A named raw source, as picked by the user or fetched."""
    name: str
    content: Union[bytes, str] = b""

    @property
    def format(self) -> SourceFormat:
        return SourceFormat.from_filename(self.name)


@dataclass
class LoadedFile:
    """Outcome of loading one source: a table or an error message."""
    name: str
    format: SourceFormat = SourceFormat.UNKNOWN
    table: Optional[Table] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.table is not None and self.error is None


@dataclass
class CatalogBrand:
    """A brand and its model folders from the catalog listing."""
    name: str
    models: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the folder-listing shape."""
        return {
            "name": self.name,
            "folders": [{"name": model} for model in self.models]
        }
