"""UI components for the scan viewer."""

from .results_panel import ResultsPanel
from .status_bar import StatusBar

__all__ = ["ResultsPanel", "StatusBar"]
