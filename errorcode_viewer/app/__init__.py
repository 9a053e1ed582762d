"""
App module for Error Code Viewer application.
Contains Qt UI components and main window.
"""

from .main_window import MainWindow
from .dialogs import ErrorRecordDialog
from .widgets import (
    ErrorDetailPanel,
    FileViewerTab,
    LookupFilterBar,
    PagerBar,
    ResultsTable,
)
from .workers import RequestTracker, TaskResult, TaskRunner, TaskWorker

__all__ = [
    "MainWindow",
    "ErrorRecordDialog",
    "ErrorDetailPanel",
    "FileViewerTab",
    "LookupFilterBar",
    "PagerBar",
    "ResultsTable",
    "RequestTracker",
    "TaskResult",
    "TaskRunner",
    "TaskWorker",
]
