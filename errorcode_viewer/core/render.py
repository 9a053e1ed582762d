"""
Grid and detail projections for the Error Code Viewer application.
"""
from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .models import ErrorRecord, ManualLink, Table, TreeRow, TreeTable
from .paginator import Page

# Separator placed between consecutive manual links
LINK_SEPARATOR = " | "

NO_LINKS_TEXT = "No hay enlaces disponibles"

UNSPECIFIED_SEVERITY = "No especificado"

SEVERITY_LABELS = {
    "bajo": "Bajo - Informativo",
    "medio": "Medio - Precaución",
    "alto": "Alto - Atención Inmediata",
    "crítico": "Crítico - Peligro",
}

SEVERITY_SHORT_LABELS = {
    "bajo": "Bajo",
    "medio": "Medio",
    "alto": "Alto",
    "crítico": "Crítico",
}

# (wire key, header) pairs for the lookup results grid
LOOKUP_COLUMNS = [
    ("brandName", "Brand"),
    ("model", "Model"),
    ("errorCode", "Code"),
    ("description", "Description"),
]

TREE_INDENT = "  "


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _tree_cells(row: TreeRow) -> list[str]:
    node = row.node
    attributes = "\n".join(f"{name}: {value}" for name, value in node.attributes.items())
    return [TREE_INDENT * row.depth + node.name, attributes, node.value]


def project_grid(table: Table, rows: list[Any]) -> list[list[str]]:
    """
    Turn rows of a table into display cells.

    Flat rows give one cell per column in column order. Tree rows give the
    indented element name, its attributes as 'name: value' lines, and its
    direct text.

    Args:
        table: Table the rows came from
        rows: Rows to project, usually one page

    Returns:
        One list of cell strings per row
    """
    if isinstance(table, TreeTable):
        return [_tree_cells(row) for row in rows]
    return [[_cell_text(row.get(col, "")) for col in table.columns] for row in rows]


def project_records(records: list[ErrorRecord]) -> list[list[str]]:
    """Cells of the lookup grid for a page of error records."""
    return [
        [record.field_value(key) for key, _ in LOOKUP_COLUMNS]
        for record in records
    ]


def severity_label(severity: Optional[str]) -> str:
    """Long label for a stored severity value; only exact values are known."""
    return SEVERITY_LABELS.get(severity or "", UNSPECIFIED_SEVERITY)


def severity_short_label(severity: Optional[str]) -> str:
    """Short label for a stored severity value."""
    return SEVERITY_SHORT_LABELS.get(severity or "", UNSPECIFIED_SEVERITY)


def links_text(links: list[ManualLink]) -> str:
    """Link texts with a separator between consecutive entries."""
    if not links:
        return NO_LINKS_TEXT
    return LINK_SEPARATOR.join(link.text for link in links)


@dataclass
class ErrorDetail:
    """What the detail panel shows for one error record."""
    error_code: str
    title: str
    model: str
    description: str
    brand_initial: str
    severity: str
    causes: list[str] = field(default_factory=list)
    solutions: list[str] = field(default_factory=list)
    diagram: Optional[str] = None
    links: list[ManualLink] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: ErrorRecord) -> ErrorDetail:
        brand = record.brand_name or record.brand
        return cls(
            error_code=record.error_code,
            title=record.title,
            model=record.model,
            description=record.description,
            brand_initial=brand[:1].upper(),
            severity=severity_label(record.severity),
            causes=list(record.causes),
            solutions=list(record.solutions),
            diagram=record.diagram,
            links=list(record.manual_links)
        )

    @property
    def has_diagram(self) -> bool:
        return bool(self.diagram)

    def links_text(self) -> str:
        return links_text(self.links)

    def links_html(self) -> str:
        """Links as anchors for a rich-text label."""
        if not self.links:
            return NO_LINKS_TEXT
        return LINK_SEPARATOR.join(
            f'<a href="{html.escape(link.url)}">{html.escape(link.text)}</a>'
            for link in self.links
        )


def results_summary(count: int) -> str:
    if count == 1:
        return "1 error code found"
    return f"{count} error codes found"


def page_label(page: Union[Page, int], page_count: Optional[int] = None) -> str:
    """'Page X of Y' for a Page, or for explicit numbers."""
    if isinstance(page, Page):
        return f"Page {page.current_page} of {page.page_count}"
    return f"Page {page} of {page_count or 1}"
