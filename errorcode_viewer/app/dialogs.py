"""
Dialog windows for the Error Code Viewer application.
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLineEdit,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from ..core import (
    CatalogBrand,
    ErrorRecord,
    ManualLink,
    Severity,
    severity_label,
)


def split_lines(text: str) -> list[str]:
    """One entry per non-blank line, trimmed."""
    return [line.strip() for line in text.splitlines() if line.strip()]


def clean_links(pairs: list[tuple[str, str]]) -> list[ManualLink]:
    """Keep only links with both a text and a URL."""
    return [
        ManualLink(text=text.strip(), url=url.strip())
        for text, url in pairs
        if text.strip() and url.strip()
    ]


class ErrorRecordDialog(QDialog):
    """Create or edit one error record."""

    def __init__(
        self,
        record: Optional[ErrorRecord] = None,
        catalog: Optional[list[CatalogBrand]] = None,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)
        self.record = record or ErrorRecord()
        self.catalog = catalog or []

        self.setWindowTitle("Edit Error Code" if record and record.id is not None else "New Error Code")
        self.setMinimumSize(600, 650)

        self._setup_ui()
        self._load_record(self.record)

    def _setup_ui(self):
        layout = QVBoxLayout(self)

        form = QFormLayout()

        self.brand_combo = QComboBox()
        self.brand_combo.setEditable(True)
        self.brand_combo.addItems([brand.name for brand in self.catalog])
        form.addRow("Brand:", self.brand_combo)

        self.brand_name_edit = QLineEdit()
        self.brand_name_edit.setPlaceholderText("Display name, e.g. Schneider Electric")
        form.addRow("Brand name:", self.brand_name_edit)

        self.model_edit = QLineEdit()
        form.addRow("Model:", self.model_edit)

        self.code_edit = QLineEdit()
        form.addRow("Error code:", self.code_edit)

        self.title_edit = QLineEdit()
        form.addRow("Title:", self.title_edit)

        self.description_edit = QPlainTextEdit()
        self.description_edit.setMaximumHeight(70)
        form.addRow("Description:", self.description_edit)

        self.causes_edit = QPlainTextEdit()
        self.causes_edit.setPlaceholderText("One cause per line")
        self.causes_edit.setMaximumHeight(90)
        form.addRow("Causes:", self.causes_edit)

        self.solutions_edit = QPlainTextEdit()
        self.solutions_edit.setPlaceholderText("One solution per line")
        self.solutions_edit.setMaximumHeight(90)
        form.addRow("Solutions:", self.solutions_edit)

        self.severity_combo = QComboBox()
        for severity in Severity:
            self.severity_combo.addItem(severity_label(severity.value), severity.value)
        form.addRow("Severity:", self.severity_combo)

        self.diagram_edit = QLineEdit()
        self.diagram_edit.setPlaceholderText("Optional image path")
        form.addRow("Diagram:", self.diagram_edit)

        layout.addLayout(form)

        # Manual links
        links_group = QGroupBox("Manual Links")
        links_layout = QVBoxLayout(links_group)

        self.links_table = QTableWidget(0, 2)
        self.links_table.setHorizontalHeaderLabels(["Text", "URL"])
        self.links_table.horizontalHeader().setStretchLastSection(True)
        links_layout.addWidget(self.links_table)

        links_btn_layout = QHBoxLayout()
        add_link_btn = QPushButton("Add Link")
        add_link_btn.clicked.connect(lambda: self._add_link_row("", ""))
        links_btn_layout.addWidget(add_link_btn)

        remove_link_btn = QPushButton("Remove Link")
        remove_link_btn.clicked.connect(self._remove_link_row)
        links_btn_layout.addWidget(remove_link_btn)
        links_btn_layout.addStretch()
        links_layout.addLayout(links_btn_layout)

        layout.addWidget(links_group)

        # Buttons
        button_box = QDialogButtonBox(
            QDialogButtonBox.StandardButton.Ok |
            QDialogButtonBox.StandardButton.Cancel
        )
        button_box.accepted.connect(self.accept)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)

    def _load_record(self, record: ErrorRecord):
        self.brand_combo.setCurrentText(record.brand)
        self.brand_name_edit.setText(record.brand_name)
        self.model_edit.setText(record.model)
        self.code_edit.setText(record.error_code)
        self.title_edit.setText(record.title)
        self.description_edit.setPlainText(record.description)
        self.causes_edit.setPlainText("\n".join(record.causes))
        self.solutions_edit.setPlainText("\n".join(record.solutions))

        index = self.severity_combo.findData(record.severity)
        self.severity_combo.setCurrentIndex(index if index >= 0 else 0)

        self.diagram_edit.setText(record.diagram or "")

        for link in record.manual_links:
            self._add_link_row(link.text, link.url)

    def _add_link_row(self, text: str, url: str):
        row = self.links_table.rowCount()
        self.links_table.insertRow(row)
        self.links_table.setItem(row, 0, QTableWidgetItem(text))
        self.links_table.setItem(row, 1, QTableWidgetItem(url))

    def _remove_link_row(self):
        row = self.links_table.currentRow()
        if row >= 0:
            self.links_table.removeRow(row)

    def _link_pairs(self) -> list[tuple[str, str]]:
        pairs = []
        for row in range(self.links_table.rowCount()):
            text_item = self.links_table.item(row, 0)
            url_item = self.links_table.item(row, 1)
            pairs.append((
                text_item.text() if text_item else "",
                url_item.text() if url_item else ""
            ))
        return pairs

    def get_record(self) -> ErrorRecord:
        """Build a record from the form values."""
        brand = self.brand_combo.currentText().strip()
        return ErrorRecord(
            id=self.record.id,
            brand=brand.lower(),
            brand_name=self.brand_name_edit.text().strip() or brand.capitalize(),
            model=self.model_edit.text().strip(),
            error_code=self.code_edit.text().strip(),
            title=self.title_edit.text().strip(),
            description=self.description_edit.toPlainText().strip(),
            causes=split_lines(self.causes_edit.toPlainText()),
            solutions=split_lines(self.solutions_edit.toPlainText()),
            severity=self.severity_combo.currentData() or "",
            diagram=self.diagram_edit.text().strip() or None,
            manual_links=clean_links(self._link_pairs()),
            created_at=self.record.created_at,
            updated_at=self.record.updated_at
        )

    def accept(self):
        """Refuse to close while required fields are blank."""
        missing = self.get_record().missing_fields()
        if missing:
            QMessageBox.warning(
                self,
                "Missing Fields",
                "Please fill in the required fields:\n" + ", ".join(missing)
            )
            return
        super().accept()
