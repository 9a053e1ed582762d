"""
Main Window for the Error Code Viewer application.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from PySide6.QtCore import Qt, Slot
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSplitter,
    QTabWidget,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from ..config import Settings, get_settings
from ..core import (
    LOOKUP_COLUMNS,
    CatalogBrand,
    ErrorCodeClient,
    ErrorDetail,
    ErrorRecord,
    FileReader,
    Page,
    QueryState,
    SessionManager,
    ViewerError,
    load_catalog,
    load_paths,
    load_records,
    project_records,
    resolve_dataset_path,
    results_summary,
    summarize_records,
)
from ..plot import StatsPanel
from .dialogs import ErrorRecordDialog
from .widgets import (
    ErrorDetailPanel,
    FileViewerTab,
    LookupFilterBar,
    ResultsTable,
)
from .workers import RequestTracker, TaskResult, TaskRunner

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Main application window."""

    def __init__(self, settings: Optional[Settings] = None):
        super().__init__()

        self.settings = settings or get_settings()

        self.setWindowTitle("Error Code Viewer")
        self.setMinimumSize(1100, 700)
        self.resize(1300, 850)

        # Core data
        self.catalog: list[CatalogBrand] = []
        self.file_reader = FileReader()
        self.client = ErrorCodeClient(
            self.settings.API_BASE_URL,
            timeout=self.settings.REQUEST_TIMEOUT
        )
        self.lookup_manager = SessionManager(self.settings.PAGE_SIZE, self)
        self._selected_record: Optional[ErrorRecord] = None

        # One tracker per surface; only the newest request may apply its result
        self.lookup_tracker = RequestTracker()
        self.files_tracker = RequestTracker()
        self.stats_tracker = RequestTracker()
        self.admin_tracker = RequestTracker()
        self.task_runner = TaskRunner(self)

        # UI components (will be set up in _setup_ui)
        self.filter_bar: Optional[LookupFilterBar] = None
        self.results_table: Optional[ResultsTable] = None
        self.detail_panel: Optional[ErrorDetailPanel] = None
        self.file_tabs: Optional[QTabWidget] = None
        self.stats_panel: Optional[StatsPanel] = None

        self._setup_ui()
        self._setup_menus()
        self._setup_toolbar()
        self._setup_connections()

        self._load_catalog()

        # Status bar
        self.statusBar().showMessage(f"Ready ({self.data_source_name})")

        self.on_search(QueryState())

    @property
    def is_remote(self) -> bool:
        return self.settings.DATA_SOURCE == "api"

    @property
    def data_source_name(self) -> str:
        if self.is_remote:
            return f"API: {self.settings.API_BASE_URL}"
        return f"Local: {self.settings.database_path}"

    def _setup_ui(self):
        """Set up the main UI layout."""
        self.tabs = QTabWidget()
        self.setCentralWidget(self.tabs)

        # Error code lookup
        lookup_widget = QWidget()
        lookup_layout = QVBoxLayout(lookup_widget)
        lookup_layout.setContentsMargins(5, 5, 5, 5)

        self.filter_bar = LookupFilterBar()
        lookup_layout.addWidget(self.filter_bar)

        splitter = QSplitter(Qt.Orientation.Horizontal)
        self.results_table = ResultsTable()
        splitter.addWidget(self.results_table)
        self.detail_panel = ErrorDetailPanel()
        splitter.addWidget(self.detail_panel)
        splitter.setSizes([700, 500])
        lookup_layout.addWidget(splitter, 1)

        self.tabs.addTab(lookup_widget, "Error Codes")

        # File viewer: one tab per imported file
        files_widget = QWidget()
        files_layout = QVBoxLayout(files_widget)
        files_layout.setContentsMargins(5, 5, 5, 5)

        files_btn_layout = QHBoxLayout()
        import_btn = QPushButton("Import Files...")
        import_btn.clicked.connect(self.on_import_files)
        files_btn_layout.addWidget(import_btn)
        files_btn_layout.addStretch()
        files_layout.addLayout(files_btn_layout)

        self.file_tabs = QTabWidget()
        self.file_tabs.setTabsClosable(True)
        self.file_tabs.tabCloseRequested.connect(self.on_close_file_tab)
        files_layout.addWidget(self.file_tabs, 1)

        self.tabs.addTab(files_widget, "File Viewer")

        # Statistics
        stats_widget = QWidget()
        stats_layout = QVBoxLayout(stats_widget)

        stats_btn_layout = QHBoxLayout()
        refresh_btn = QPushButton("Refresh")
        refresh_btn.clicked.connect(self.on_refresh_stats)
        stats_btn_layout.addWidget(refresh_btn)
        stats_btn_layout.addStretch()
        stats_layout.addLayout(stats_btn_layout)

        self.stats_panel = StatsPanel()
        stats_layout.addWidget(self.stats_panel, 1)

        self.tabs.addTab(stats_widget, "Statistics")

    def _setup_menus(self):
        """Set up the menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        import_files_action = QAction("Import Files...", self)
        import_files_action.setShortcut(QKeySequence("Ctrl+I"))
        import_files_action.triggered.connect(self.on_import_files)
        file_menu.addAction(import_files_action)

        close_files_action = QAction("Close All Files", self)
        close_files_action.triggered.connect(self.on_close_all_files)
        file_menu.addAction(close_files_action)

        file_menu.addSeparator()

        exit_action = QAction("Exit", self)
        exit_action.setShortcut(QKeySequence.StandardKey.Quit)
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Records menu (admin actions through the REST API)
        records_menu = menubar.addMenu("&Records")

        new_action = QAction("New Error Code...", self)
        new_action.setShortcut(QKeySequence.StandardKey.New)
        new_action.triggered.connect(self.on_new_record)
        records_menu.addAction(new_action)

        edit_action = QAction("Edit Selected...", self)
        edit_action.triggered.connect(self.on_edit_record)
        records_menu.addAction(edit_action)

        delete_action = QAction("Delete Selected", self)
        delete_action.setShortcut(QKeySequence.StandardKey.Delete)
        delete_action.triggered.connect(self.on_delete_record)
        records_menu.addAction(delete_action)

        records_menu.addSeparator()

        init_action = QAction("Initialize Database...", self)
        init_action.triggered.connect(self.on_init_database)
        records_menu.addAction(init_action)

        # View menu
        view_menu = menubar.addMenu("&View")

        refresh_action = QAction("Refresh Results", self)
        refresh_action.setShortcut(QKeySequence.StandardKey.Refresh)
        refresh_action.triggered.connect(self.on_refresh_results)
        view_menu.addAction(refresh_action)

        stats_action = QAction("Refresh Statistics", self)
        stats_action.triggered.connect(self.on_refresh_stats)
        view_menu.addAction(stats_action)

        # Help menu
        help_menu = menubar.addMenu("&Help")

        about_action = QAction("About", self)
        about_action.triggered.connect(self.on_about)
        help_menu.addAction(about_action)

    def _setup_toolbar(self):
        """Set up the toolbar."""
        toolbar = QToolBar("Main Toolbar")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)

        toolbar.addAction("Import", self.on_import_files)
        toolbar.addSeparator()
        toolbar.addAction("New", self.on_new_record)
        toolbar.addAction("Edit", self.on_edit_record)
        toolbar.addAction("Delete", self.on_delete_record)
        toolbar.addSeparator()
        toolbar.addAction("Statistics", self.on_refresh_stats)

    def _setup_connections(self):
        """Set up signal/slot connections."""
        self.filter_bar.search_requested.connect(self.on_search)
        self.filter_bar.reset_requested.connect(self.on_reset_search)

        self.results_table.row_activated.connect(self.on_record_activated)
        self.results_table.previous_requested.connect(self.lookup_manager.previous_page)
        self.results_table.next_requested.connect(self.lookup_manager.next_page)

        self.lookup_manager.page_changed.connect(self.on_lookup_page_changed)

        self.tabs.currentChanged.connect(self.on_tab_changed)

    def _load_catalog(self):
        """Fill the brand/model combos from the catalog file."""
        try:
            self.catalog = load_catalog(self.settings.catalog_path)
        except ViewerError as e:
            logger.warning("Catalog unavailable: %s", e)
            self.catalog = []
            self.statusBar().showMessage(f"Catalog unavailable: {e}")

        self.filter_bar.set_catalog(self.catalog)

    def _run_task(
        self,
        tracker: RequestTracker,
        callback: Callable[[TaskResult], None],
        func: Callable[..., Any],
        *args: Any
    ) -> None:
        """Run func in a worker; drop its result if a newer request started."""
        self.task_runner.start(tracker, callback, func, *args)

    def _fetch_records(self, query: QueryState) -> tuple[list[ErrorRecord], bool]:
        """Fetch records for a lookup; the flag says whether the server filtered them."""
        if self.is_remote:
            if query.is_empty:
                return self.client.list_all(), True
            return self.client.search(query), True

        brand = query.field_filters.get("brand", "").strip()
        model = query.field_filters.get("model", "").strip()
        if self.settings.DATABASES_DIR is not None and brand and model:
            path = resolve_dataset_path(
                self.settings.DATABASES_DIR,
                brand,
                model,
                self.settings.DATASET_FILENAME
            )
        else:
            path = self.settings.database_path
        return load_records(path), False

    def _fetch_stats(self) -> dict[str, Any]:
        if self.is_remote:
            return self.client.stats()
        return summarize_records(load_records(self.settings.database_path))

    def _require_remote(self) -> bool:
        if self.is_remote:
            return True
        QMessageBox.information(
            self,
            "Read-only Data Source",
            "Editing error codes requires the REST API data source."
        )
        return False

    # =========================================================================
    # Slots
    # =========================================================================

    @Slot(object)
    def on_search(self, query: QueryState):
        """Run a lookup with the given filters."""
        self.statusBar().showMessage("Searching...")
        self._run_task(
            self.lookup_tracker,
            lambda result: self._on_search_finished(query, result),
            self._fetch_records,
            query
        )

    def _on_search_finished(self, query: QueryState, result: TaskResult):
        self._selected_record = None
        self.detail_panel.clear()

        if not result.ok:
            self.lookup_manager.clear()
            self.results_table.show_error(result.error_message or "Search failed")
            self.statusBar().showMessage("Search failed")
            return

        records, remote = result.value
        self.lookup_manager.load(records, query=query, remote=remote)
        self.statusBar().showMessage(results_summary(self.lookup_manager.session.row_count))

    @Slot()
    def on_reset_search(self):
        self.on_search(QueryState())

    @Slot()
    def on_refresh_results(self):
        self.on_search(self.filter_bar.query())

    @Slot(object)
    def on_lookup_page_changed(self, page: Page):
        """Render the visible page of lookup results."""
        headers = [header for _, header in LOOKUP_COLUMNS]
        self.results_table.show_page(
            headers,
            project_records(page.rows),
            page,
            results_summary(page.total_rows)
        )

    @Slot(int)
    def on_record_activated(self, row: int):
        """Show the detail of a clicked record."""
        page = self.lookup_manager.current_page()
        if not 0 <= row < len(page.rows):
            return

        self._selected_record = page.rows[row]
        self.detail_panel.show_detail(ErrorDetail.from_record(self._selected_record))

    @Slot()
    def on_import_files(self):
        """Import one or more files into the file viewer."""
        files, _ = QFileDialog.getOpenFileNames(
            self,
            "Import Data Files",
            "",
            "Data Files (*.csv *.json *.xml *.xlsx *.xls);;All Files (*)"
        )

        if not files:
            return

        self.statusBar().showMessage(f"Loading {len(files)} file(s)...")
        self._run_task(
            self.files_tracker,
            self._on_files_loaded,
            load_paths,
            files,
            self.file_reader,
            self.settings.LOAD_WORKERS
        )

    def _on_files_loaded(self, result: TaskResult):
        if not result.ok:
            QMessageBox.warning(
                self,
                "Import Error",
                f"Failed to import files:\n{result.error_message}"
            )
            return

        loaded_files = result.value
        for loaded in loaded_files:
            tab = FileViewerTab(loaded, self.settings.PAGE_SIZE)
            index = self.file_tabs.addTab(tab, loaded.name)
            if not loaded.ok:
                self.file_tabs.setTabToolTip(index, loaded.error or "")

        if loaded_files:
            self.file_tabs.setCurrentIndex(self.file_tabs.count() - 1)
            self.tabs.setCurrentIndex(1)

        failed = sum(1 for f in loaded_files if not f.ok)
        self.statusBar().showMessage(
            f"Imported {len(loaded_files) - failed} file(s), {failed} failed"
        )

    @Slot(int)
    def on_close_file_tab(self, index: int):
        widget = self.file_tabs.widget(index)
        self.file_tabs.removeTab(index)
        if widget is not None:
            widget.deleteLater()

    @Slot()
    def on_close_all_files(self):
        while self.file_tabs.count():
            self.on_close_file_tab(0)

    @Slot(int)
    def on_tab_changed(self, index: int):
        if self.tabs.widget(index) is self.stats_panel.parentWidget():
            self.on_refresh_stats()

    @Slot()
    def on_refresh_stats(self):
        """Reload the statistics view."""
        self.statusBar().showMessage("Loading statistics...")
        self._run_task(self.stats_tracker, self._on_stats_loaded, self._fetch_stats)

    def _on_stats_loaded(self, result: TaskResult):
        if not result.ok:
            self.stats_panel.clear()
            self.statusBar().showMessage(f"Statistics unavailable: {result.error_message}")
            return

        self.stats_panel.set_stats(result.value)
        self.statusBar().showMessage("Statistics updated")

    @Slot()
    def on_new_record(self):
        """Create a new error code."""
        if not self._require_remote():
            return

        dialog = ErrorRecordDialog(None, self.catalog, self)
        if dialog.exec() == ErrorRecordDialog.Accepted:
            record = dialog.get_record()
            self._run_task(
                self.admin_tracker,
                lambda result: self._on_admin_finished("Created", result),
                self.client.create,
                record
            )

    @Slot()
    def on_edit_record(self):
        """Edit the selected error code."""
        if not self._require_remote():
            return

        record = self._selected_record
        if record is None or record.id is None:
            QMessageBox.information(
                self, "No Record Selected",
                "Please select an error code first."
            )
            return

        dialog = ErrorRecordDialog(record, self.catalog, self)
        if dialog.exec() == ErrorRecordDialog.Accepted:
            self._run_task(
                self.admin_tracker,
                lambda result: self._on_admin_finished("Updated", result),
                self.client.update,
                record.id,
                dialog.get_record()
            )

    @Slot()
    def on_delete_record(self):
        """Delete the selected error code."""
        if not self._require_remote():
            return

        record = self._selected_record
        if record is None or record.id is None:
            QMessageBox.information(
                self, "No Record Selected",
                "Please select an error code first."
            )
            return

        answer = QMessageBox.question(
            self,
            "Delete Error Code",
            f"Delete error code '{record.error_code}' ({record.model})?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if answer == QMessageBox.StandardButton.Yes:
            self._run_task(
                self.admin_tracker,
                lambda result: self._on_admin_finished("Deleted", result),
                self.client.delete,
                record.id
            )

    @Slot()
    def on_init_database(self):
        """Reset the server database to its sample data."""
        if not self._require_remote():
            return

        answer = QMessageBox.question(
            self,
            "Initialize Database",
            "Replace every error code on the server with the sample data?",
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No
        )
        if answer == QMessageBox.StandardButton.Yes:
            self._run_task(
                self.admin_tracker,
                lambda result: self._on_admin_finished("Initialized", result),
                self.client.init_database
            )

    def _on_admin_finished(self, action: str, result: TaskResult):
        if not result.ok:
            QMessageBox.warning(
                self,
                "Request Failed",
                f"{action} failed:\n{result.error_message}"
            )
            return

        self.statusBar().showMessage(f"{action} successfully")
        self.on_refresh_results()

    @Slot()
    def on_about(self):
        """Show about dialog."""
        QMessageBox.about(
            self,
            "About Error Code Viewer",
            "Error Code Viewer\n\n"
            "Lookup of industrial equipment error codes and a viewer for\n"
            "CSV, JSON, XML and spreadsheet files.\n\n"
            f"Data source: {self.data_source_name}"
        )

    def closeEvent(self, event):
        """Handle window close."""
        # Let running requests finish so no thread outlives the window
        self.task_runner.wait_all()
        event.accept()
