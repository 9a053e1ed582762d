"""
Widget components for the Error Code Viewer application.
"""
from __future__ import annotations

import html
from typing import Optional

from PySide6.QtCore import Qt, Signal, Slot
from PySide6.QtWidgets import (
    QAbstractItemView,
    QComboBox,
    QFrame,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..core import (
    CatalogBrand,
    ErrorDetail,
    LoadedFile,
    Page,
    QueryState,
    SessionManager,
    page_label,
    project_grid,
)


class PagerBar(QWidget):
    """Previous/next buttons around a 'Page X of Y' label."""

    previous_requested = Signal()
    next_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.prev_btn = QPushButton("< Previous")
        self.prev_btn.clicked.connect(self.previous_requested)
        layout.addWidget(self.prev_btn)

        layout.addStretch()
        self.page_label = QLabel(page_label(1, 1))
        layout.addWidget(self.page_label)
        layout.addStretch()

        self.next_btn = QPushButton("Next >")
        self.next_btn.clicked.connect(self.next_requested)
        layout.addWidget(self.next_btn)

        self.set_page(Page())

    def set_page(self, page: Page) -> None:
        """Update label and button state for a page."""
        self.page_label.setText(page_label(page))
        self.prev_btn.setEnabled(page.has_previous)
        self.next_btn.setEnabled(page.has_next)


class ResultsTable(QWidget):
    """Read-only grid for one page of rows, with a summary line and pager."""

    row_activated = Signal(int)  # row index within the page
    previous_requested = Signal()
    next_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        self.summary_label = QLabel("")
        layout.addWidget(self.summary_label)

        self.table = QTableWidget()
        self.table.setEditTriggers(QAbstractItemView.EditTrigger.NoEditTriggers)
        self.table.setSelectionBehavior(QAbstractItemView.SelectionBehavior.SelectRows)
        self.table.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.table.setAlternatingRowColors(True)
        self.table.horizontalHeader().setStretchLastSection(True)
        self.table.verticalHeader().setVisible(False)
        self.table.cellClicked.connect(lambda row, _col: self.row_activated.emit(row))
        layout.addWidget(self.table, 1)

        self.pager = PagerBar()
        self.pager.previous_requested.connect(self.previous_requested)
        self.pager.next_requested.connect(self.next_requested)
        layout.addWidget(self.pager)

    def show_page(
        self,
        headers: list[str],
        cells: list[list[str]],
        page: Page,
        summary: str = ""
    ) -> None:
        """Replace the grid contents with one projected page."""
        self.summary_label.setStyleSheet("")
        self.table.clear()
        self.table.setColumnCount(len(headers))
        self.table.setHorizontalHeaderLabels(headers)
        self.table.setRowCount(len(cells))

        for i, row in enumerate(cells):
            for j, text in enumerate(row):
                self.table.setItem(i, j, QTableWidgetItem(text))

        self.table.resizeColumnsToContents()
        self.table.resizeRowsToContents()
        self.table.horizontalHeader().setStretchLastSection(True)

        if page.is_empty:
            summary = summary or "No results"
        self.summary_label.setText(summary)
        self.pager.set_page(page)

    def show_error(self, message: str) -> None:
        """Show an error state instead of any rows."""
        self.table.clear()
        self.table.setRowCount(0)
        self.table.setColumnCount(0)
        self.summary_label.setStyleSheet("color: #e06c75;")
        self.summary_label.setText(message)
        self.pager.set_page(Page())


class LookupFilterBar(QWidget):
    """Brand/model combos, code and free-text boxes for the lookup tab."""

    search_requested = Signal(object)  # QueryState
    reset_requested = Signal()

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._catalog: list[CatalogBrand] = []

        layout = QGridLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)

        layout.addWidget(QLabel("Brand:"), 0, 0)
        self.brand_combo = QComboBox()
        self.brand_combo.currentIndexChanged.connect(self._on_brand_changed)
        layout.addWidget(self.brand_combo, 0, 1)

        layout.addWidget(QLabel("Model:"), 0, 2)
        self.model_combo = QComboBox()
        layout.addWidget(self.model_combo, 0, 3)

        layout.addWidget(QLabel("Code:"), 1, 0)
        self.code_edit = QLineEdit()
        self.code_edit.setPlaceholderText("e.g. F0001")
        self.code_edit.returnPressed.connect(self._emit_search)
        layout.addWidget(self.code_edit, 1, 1)

        layout.addWidget(QLabel("Search:"), 1, 2)
        self.text_edit = QLineEdit()
        self.text_edit.setPlaceholderText("Title, description, cause...")
        self.text_edit.returnPressed.connect(self._emit_search)
        layout.addWidget(self.text_edit, 1, 3)

        btn_layout = QHBoxLayout()
        search_btn = QPushButton("Search")
        search_btn.clicked.connect(self._emit_search)
        btn_layout.addWidget(search_btn)

        reset_btn = QPushButton("Reset")
        reset_btn.clicked.connect(self._on_reset)
        btn_layout.addWidget(reset_btn)
        layout.addLayout(btn_layout, 0, 4, 2, 1)

        self.set_catalog([])

    def set_catalog(self, catalog: list[CatalogBrand]) -> None:
        """Fill the brand combo from the catalog."""
        self._catalog = list(catalog)

        self.brand_combo.blockSignals(True)
        self.brand_combo.clear()
        self.brand_combo.addItem("All brands", "")
        for brand in self._catalog:
            self.brand_combo.addItem(brand.name.capitalize(), brand.name)
        self.brand_combo.blockSignals(False)

        self._on_brand_changed(0)

    def _on_brand_changed(self, index: int):
        self.model_combo.clear()
        self.model_combo.addItem("All models", "")

        brand_name = self.brand_combo.itemData(index) if index >= 0 else ""
        for brand in self._catalog:
            if brand.name == brand_name:
                for model in brand.models:
                    self.model_combo.addItem(model, model)
                break

    def query(self) -> QueryState:
        """Current filter values as a QueryState."""
        return QueryState(
            free_text=self.text_edit.text(),
            field_filters={
                "brand": self.brand_combo.currentData() or "",
                "model": self.model_combo.currentData() or "",
                "errorCode": self.code_edit.text()
            }
        )

    def clear(self) -> None:
        self.brand_combo.setCurrentIndex(0)
        self.model_combo.setCurrentIndex(0)
        self.code_edit.clear()
        self.text_edit.clear()

    def _emit_search(self):
        self.search_requested.emit(self.query())

    def _on_reset(self):
        self.clear()
        self.reset_requested.emit()


def _html_list(items: list[str]) -> str:
    if not items:
        return "<i>None listed</i>"
    entries = "".join(f"<li>{html.escape(item)}</li>" for item in items)
    return f"<ol>{entries}</ol>"


class ErrorDetailPanel(QFrame):
    """Detail view for a single error record."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.StyledPanel)

        layout = QVBoxLayout(self)

        # Header: brand initial, code and title
        header_layout = QHBoxLayout()
        self.initial_label = QLabel("")
        self.initial_label.setFixedSize(40, 40)
        self.initial_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.initial_label.setStyleSheet(
            "background-color: #2a82da; color: white; border-radius: 20px; font-weight: bold;"
        )
        header_layout.addWidget(self.initial_label)

        self.title_label = QLabel("Select an error code to see its details")
        self.title_label.setWordWrap(True)
        self.title_label.setStyleSheet("font-size: 14pt; font-weight: bold;")
        header_layout.addWidget(self.title_label, 1)
        layout.addLayout(header_layout)

        self.model_label = QLabel("")
        layout.addWidget(self.model_label)

        self.severity_label = QLabel("")
        layout.addWidget(self.severity_label)

        self.description_label = QLabel("")
        self.description_label.setWordWrap(True)
        layout.addWidget(self.description_label)

        causes_group = QGroupBox("Possible causes")
        causes_layout = QVBoxLayout(causes_group)
        self.causes_label = QLabel("")
        self.causes_label.setWordWrap(True)
        self.causes_label.setTextFormat(Qt.TextFormat.RichText)
        causes_layout.addWidget(self.causes_label)
        layout.addWidget(causes_group)

        solutions_group = QGroupBox("Solutions")
        solutions_layout = QVBoxLayout(solutions_group)
        self.solutions_label = QLabel("")
        self.solutions_label.setWordWrap(True)
        self.solutions_label.setTextFormat(Qt.TextFormat.RichText)
        solutions_layout.addWidget(self.solutions_label)
        layout.addWidget(solutions_group)

        self.diagram_label = QLabel("")
        layout.addWidget(self.diagram_label)

        self.links_label = QLabel("")
        self.links_label.setTextFormat(Qt.TextFormat.RichText)
        self.links_label.setOpenExternalLinks(True)
        self.links_label.setWordWrap(True)
        layout.addWidget(self.links_label)

        layout.addStretch()

    def show_detail(self, detail: ErrorDetail) -> None:
        """Display the projection of one record."""
        self.initial_label.setText(detail.brand_initial)
        self.title_label.setText(f"{detail.error_code} - {detail.title}")
        self.model_label.setText(f"Model: {detail.model}")
        self.severity_label.setText(f"Severity: {detail.severity}")
        self.description_label.setText(detail.description)
        self.causes_label.setText(_html_list(detail.causes))
        self.solutions_label.setText(_html_list(detail.solutions))

        if detail.has_diagram:
            self.diagram_label.setText(f"Diagram: {detail.diagram}")
            self.diagram_label.show()
        else:
            self.diagram_label.hide()

        self.links_label.setText(f"Manuals: {detail.links_html()}")

    def clear(self) -> None:
        """Return to the placeholder state."""
        self.initial_label.setText("")
        self.title_label.setText("Select an error code to see its details")
        for label in (
            self.model_label,
            self.severity_label,
            self.description_label,
            self.causes_label,
            self.solutions_label,
            self.diagram_label,
            self.links_label,
        ):
            label.setText("")


class FileViewerTab(QWidget):
    """One imported file: a search box over a paged grid, or its load error."""

    def __init__(
        self,
        loaded: LoadedFile,
        page_size: int = 10,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)
        self.loaded = loaded
        self.session_manager = SessionManager(page_size, self)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)

        search_layout = QHBoxLayout()
        search_layout.addWidget(QLabel("Search:"))
        self.search_edit = QLineEdit()
        self.search_edit.setPlaceholderText("Filter rows...")
        self.search_edit.setClearButtonEnabled(True)
        self.search_edit.textChanged.connect(self._on_search_changed)
        search_layout.addWidget(self.search_edit, 1)
        layout.addLayout(search_layout)

        self.results = ResultsTable()
        self.results.previous_requested.connect(self.session_manager.previous_page)
        self.results.next_requested.connect(self.session_manager.next_page)
        layout.addWidget(self.results, 1)

        self.session_manager.page_changed.connect(self._render_page)

        if loaded.ok:
            self.session_manager.load(loaded.table)
        else:
            self.search_edit.setEnabled(False)
            self.results.show_error(f"Could not load {loaded.name}: {loaded.error}")

    @Slot(str)
    def _on_search_changed(self, text: str):
        self.session_manager.apply_query(QueryState(free_text=text))

    @Slot(object)
    def _render_page(self, page: Page):
        session = self.session_manager.session
        if session is None:
            return

        table = session.table
        cells = project_grid(table, page.rows)
        summary = f"{page.total_rows} of {table.row_count} row(s)"
        self.results.show_page(list(table.columns), cells, page, summary)
