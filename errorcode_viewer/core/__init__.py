"""
Core module for Error Code Viewer application.
Contains the table model, format adapters, query engine, pagination,
render projections and the REST client.
"""

from .models import (
    CatalogBrand,
    ErrorRecord,
    FlatTable,
    LoadedFile,
    ManualLink,
    PageState,
    QueryState,
    Severity,
    SourceFile,
    SourceFormat,
    Table,
    TreeNode,
    TreeRow,
    TreeTable,
)
from .exceptions import (
    MalformedSourceError,
    SourceUnavailableError,
    UnsupportedFormatError,
    ViewerError,
)
from .io_handler import (
    FileReader,
    detect_format,
    load_files,
    load_paths,
    parse_source,
    records_to_table,
)
from .catalog import (
    find_brand,
    load_catalog,
    load_records,
    parse_catalog,
    parse_records,
    resolve_dataset_path,
)
from .filter_manager import (
    SessionManager,
    ViewerSession,
    build_search_params,
    filter_records,
    filter_rows,
)
from .paginator import (
    Page,
    next_page,
    page_count,
    paginate,
    previous_page,
)
from .render import (
    LOOKUP_COLUMNS,
    ErrorDetail,
    page_label,
    project_grid,
    project_records,
    results_summary,
    severity_label,
    severity_short_label,
)
from .stats import summarize_records
from .api_client import ErrorCodeClient

__all__ = [
    # Models
    "CatalogBrand",
    "ErrorRecord",
    "FlatTable",
    "LoadedFile",
    "ManualLink",
    "PageState",
    "QueryState",
    "Severity",
    "SourceFile",
    "SourceFormat",
    "Table",
    "TreeNode",
    "TreeRow",
    "TreeTable",
    # Errors
    "MalformedSourceError",
    "SourceUnavailableError",
    "UnsupportedFormatError",
    "ViewerError",
    # IO
    "FileReader",
    "detect_format",
    "load_files",
    "load_paths",
    "parse_source",
    "records_to_table",
    # Catalog
    "find_brand",
    "load_catalog",
    "load_records",
    "parse_catalog",
    "parse_records",
    "resolve_dataset_path",
    # Query
    "SessionManager",
    "ViewerSession",
    "build_search_params",
    "filter_records",
    "filter_rows",
    # Pagination
    "Page",
    "next_page",
    "page_count",
    "paginate",
    "previous_page",
    # Render
    "LOOKUP_COLUMNS",
    "ErrorDetail",
    "page_label",
    "project_grid",
    "project_records",
    "results_summary",
    "severity_label",
    "severity_short_label",
    # Stats
    "summarize_records",
    # REST
    "ErrorCodeClient",
]
