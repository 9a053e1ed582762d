"""
Plot module for Error Code Viewer application.
Contains pyqtgraph bar charts for the statistics view.
"""

from .stats_chart import BarChart, StatsPanel

__all__ = ["BarChart", "StatsPanel"]
