"""
Main entry point for the Error Code Viewer application.
"""
import argparse
import logging
import sys

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

from ..config import Settings, configure_logging, get_settings
from .main_window import MainWindow

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Error Code Viewer")
    parser.add_argument(
        "--data-source", choices=["api", "local"],
        help="Read error codes from the REST API or the bundled database"
    )
    parser.add_argument("--api-url", help="Base URL of the error code API")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    # Qt consumes its own arguments (-style, -platform, ...)
    args, _ = parser.parse_known_args(argv)
    return args


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Command line values win over environment settings."""
    overrides = {}
    if args.data_source:
        overrides["DATA_SOURCE"] = args.data_source
    if args.api_url:
        overrides["API_BASE_URL"] = args.api_url
    if args.log_level:
        overrides["LOG_LEVEL"] = args.log_level
    if not overrides:
        return settings
    return settings.model_copy(update=overrides)


def dark_palette() -> QPalette:
    palette = QPalette()
    dark = QColor(53, 53, 53)
    accent = QColor(42, 130, 218)

    for role, color in (
        (QPalette.ColorRole.Window, dark),
        (QPalette.ColorRole.Button, dark),
        (QPalette.ColorRole.Base, QColor(25, 25, 25)),
        (QPalette.ColorRole.AlternateBase, QColor(45, 45, 45)),
        (QPalette.ColorRole.Link, accent),
        (QPalette.ColorRole.Highlight, accent),
    ):
        palette.setColor(role, color)

    for role in (
        QPalette.ColorRole.WindowText,
        QPalette.ColorRole.Text,
        QPalette.ColorRole.ButtonText,
    ):
        palette.setColor(role, Qt.GlobalColor.white)
    palette.setColor(QPalette.ColorRole.HighlightedText, Qt.GlobalColor.black)

    return palette


def main():
    """Run the Error Code Viewer application."""
    settings = apply_overrides(get_settings(), parse_args())
    configure_logging(settings)
    logger.info("Starting Error Code Viewer (data source: %s)", settings.DATA_SOURCE)

    QApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )

    app = QApplication(sys.argv)
    app.setApplicationName("Error Code Viewer")
    app.setOrganizationName("ErrorCodeViewer")
    app.setApplicationVersion("1.0.0")

    app.setStyle("Fusion")
    app.setPalette(dark_palette())

    window = MainWindow(settings)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
