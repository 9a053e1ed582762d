"""
Statistics charts for the Error Code Viewer application.
"""
from __future__ import annotations

from typing import Any, Optional

import numpy as np
import pyqtgraph as pg
from PySide6.QtWidgets import (
    QFrame,
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QVBoxLayout,
    QWidget,
)

from ..core import severity_short_label


BAR_COLOR = "#2a82da"

# Bar colors per severity value
SEVERITY_COLORS = {
    "bajo": "#2ca02c",      # Green
    "medio": "#bcbd22",     # Yellow-green
    "alto": "#ff7f0e",      # Orange
    "crítico": "#d62728",   # Red
}

UNKNOWN_COLOR = "#7f7f7f"


class BarChart(QWidget):
    """A titled pyqtgraph bar chart with text category ticks."""

    def __init__(self, title: str, parent: Optional[QWidget] = None):
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        pg.setConfigOptions(antialias=True, useOpenGL=False)

        self.plot_widget = pg.PlotWidget()
        self.plot_widget.setBackground("#1e1e1e")
        self.plot_widget.showGrid(x=False, y=True, alpha=0.3)
        self.plot_widget.setTitle(title)
        self.plot_widget.setMouseEnabled(x=False, y=False)
        self.plot_widget.setMenuEnabled(False)
        self.plot_item = self.plot_widget.getPlotItem()
        self.plot_item.setLabel("left", "Error codes")
        layout.addWidget(self.plot_widget)

        self._bars: Optional[pg.BarGraphItem] = None

    def set_data(
        self,
        labels: list[str],
        counts: list[int],
        colors: Optional[list[str]] = None
    ) -> None:
        """Replace the bars with one per label."""
        if self._bars is not None:
            self.plot_item.removeItem(self._bars)
            self._bars = None

        x = np.arange(len(labels))
        axis = self.plot_item.getAxis("bottom")
        axis.setTicks([list(zip(x.tolist(), labels))])

        if not labels:
            return

        brushes = [pg.mkBrush(c) for c in (colors or [BAR_COLOR] * len(labels))]
        self._bars = pg.BarGraphItem(
            x=x,
            height=np.asarray(counts, dtype=float),
            width=0.6,
            brushes=brushes
        )
        self.plot_item.addItem(self._bars)
        self.plot_item.setXRange(-0.5, len(labels) - 0.5)
        self.plot_item.setYRange(0, max(counts) + 1)


class StatsPanel(QWidget):
    """Totals plus bar charts by brand and by severity."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)

        layout = QVBoxLayout(self)

        # Totals
        totals_frame = QFrame()
        totals_frame.setFrameShape(QFrame.Shape.StyledPanel)
        totals_layout = QGridLayout(totals_frame)

        self.total_errors_label = QLabel("-")
        self.total_brands_label = QLabel("-")
        self.last_update_label = QLabel("-")
        for label in (self.total_errors_label, self.total_brands_label):
            label.setStyleSheet("font-size: 18pt; font-weight: bold;")

        totals_layout.addWidget(QLabel("Error codes"), 0, 0)
        totals_layout.addWidget(self.total_errors_label, 1, 0)
        totals_layout.addWidget(QLabel("Brands"), 0, 1)
        totals_layout.addWidget(self.total_brands_label, 1, 1)
        totals_layout.addWidget(QLabel("Last update"), 0, 2)
        totals_layout.addWidget(self.last_update_label, 1, 2)
        layout.addWidget(totals_frame)

        # Charts
        charts_layout = QHBoxLayout()
        self.brand_chart = BarChart("By brand")
        charts_layout.addWidget(self.brand_chart)
        self.severity_chart = BarChart("By severity")
        charts_layout.addWidget(self.severity_chart)
        layout.addLayout(charts_layout, 1)

    def set_stats(self, stats: dict[str, Any]) -> None:
        """Show a statistics dictionary (server or locally computed)."""
        self.total_errors_label.setText(str(stats.get("totalErrors", 0)))
        self.total_brands_label.setText(str(stats.get("totalBrands", 0)))
        self.last_update_label.setText(str(stats.get("lastUpdate") or "-"))

        by_brand = stats.get("errorsByBrand") or []
        self.brand_chart.set_data(
            [str(item.get("brandName") or item.get("_id") or "?") for item in by_brand],
            [int(item.get("count", 0)) for item in by_brand]
        )

        by_severity = stats.get("errorsBySeverity") or []
        keys = [str(item.get("_id") or "") for item in by_severity]
        self.severity_chart.set_data(
            [severity_short_label(key) for key in keys],
            [int(item.get("count", 0)) for item in by_severity],
            [SEVERITY_COLORS.get(key, UNKNOWN_COLOR) for key in keys]
        )

    def clear(self) -> None:
        self.set_stats({})
