"""Textual application showing a live subnet ping sweep."""

import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from .components import ResultsPanel, StatusBar
from .models.config import ScanOptions
from .services.pinger import Pinger
from .services.scanner import SubnetScanner

logger = logging.getLogger(__name__)


class ScanApp(App):
    """Runs a scan on start and on demand, and lists the results."""

    TITLE = "subping"

    BINDINGS = [
        Binding("r", "rescan", "Rescan"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, options: ScanOptions, pinger: Pinger) -> None:
        super().__init__()
        self.options = options
        self.pinger = pinger
        self._scanning = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield ResultsPanel(subnet=self.options.subnet)
        yield StatusBar()
        yield Footer()

    def on_mount(self) -> None:
        self.action_rescan()

    def action_rescan(self) -> None:
        """Start a fresh scan session unless one is running."""
        if self._scanning:
            return
        self.run_worker(self._scan(), exclusive=True)

    async def _scan(self) -> None:
        panel = self.query_one(ResultsPanel)
        status_bar = self.query_one(StatusBar)

        self._scanning = True
        panel.set_loading(True)
        status_bar.set_activity("Pinging...")
        try:
            scanner = SubnetScanner(self.options, self.pinger)
            await scanner.run_async()
            panel.update_results(scanner.report())
            status_bar.set_last_scan(scanner.scan_time)
        except Exception as e:
            logger.error(f"Scan error for {self.options.subnet}: {e}")
            panel.set_error(str(e))
        finally:
            self._scanning = False
            status_bar.clear_activity()
