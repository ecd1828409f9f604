"""Results panel component for displaying a subnet scan."""

import logging
import subprocess
import sys

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import DataTable, Label, Static

from ..models.scan_result import PingResult, ScanReport

logger = logging.getLogger(__name__)


class ResultsPanel(Static):
    """Panel listing ping results per host."""

    BINDINGS = [
        Binding("j", "cursor_down", "Down", show=False),
        Binding("k", "cursor_up", "Up", show=False),
        Binding("c", "copy_ip", "Copy IP", show=True),
        Binding("o", "toggle_offline", "Offline", show=True),
    ]

    DEFAULT_CSS = """
    ResultsPanel {
        height: 100%;
        border: solid $primary;
        padding: 0 1;
    }

    ResultsPanel #results-header {
        text-style: bold;
        color: $text;
        padding: 0 0 1 0;
    }

    ResultsPanel #results-status {
        color: $text-muted;
        padding: 0 0 1 0;
    }

    ResultsPanel #results-error {
        color: $error;
        padding: 1;
    }

    ResultsPanel #results-copy-status {
        color: $success;
        padding: 0 0 0 1;
    }

    ResultsPanel DataTable {
        height: 1fr;
    }
    """

    def __init__(self, subnet: str = "") -> None:
        super().__init__()
        self._subnet = subnet
        self._report: ScanReport | None = None
        self._addresses: list[str] = []
        self._show_offline = False

    def compose(self) -> ComposeResult:
        yield Label(f"Ping Sweep {self._subnet}".strip(), id="results-header")
        yield Label("", id="results-status")
        yield Label("", id="results-copy-status")
        yield Label("", id="results-error")
        with VerticalScroll():
            yield DataTable(id="results-table")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.add_columns("Status", "IP Address", "Avg Latency", "Loss", "Sent/Recv")
        table.cursor_type = "row"
        table.zebra_stripes = True

    def set_loading(self, loading: bool) -> None:
        """Set loading state."""
        status_label = self.query_one("#results-status", Label)
        self.query_one("#results-copy-status", Label).update("")
        if loading:
            status_label.update(f"Pinging {self._subnet}...")
        else:
            status_label.update("")

    def set_error(self, error: str) -> None:
        """Display an error message."""
        self.query_one("#results-error", Label).update(f"[red]{error}[/red]")
        self.query_one("#results-status", Label).update("")

    def update_results(self, report: ScanReport) -> None:
        """Update panel with a completed scan."""
        self._report = report
        self.query_one("#results-error", Label).update("")
        self.query_one("#results-copy-status", Label).update("")

        status_parts = [f"[green]{report.hosts_up} up[/green]"]
        if report.hosts_down > 0:
            status_parts.append(f"[red]{report.hosts_down} down[/red]")
        status_parts.append(f"[dim]{report.total_hosts} total[/dim]")
        status_parts.append(f"[dim]({report.duration_seconds:.1f}s)[/dim]")
        self.query_one("#results-status", Label).update(" | ".join(status_parts))

        self._render_table()

    def _render_table(self) -> None:
        table = self.query_one(DataTable)
        table.clear()
        self._addresses = []
        if self._report is None:
            return

        for address in self._report.sorted_addresses(online_only=not self._show_offline):
            result = self._report.results[address]
            self._addresses.append(address)
            table.add_row(
                self._get_status_display(result),
                address,
                f"{result.avg_rtt_ms:.2f} ms" if result.is_online else "-",
                f"{result.packet_loss:.0f}%",
                f"{result.packets_sent}/{result.packets_recv}",
            )

    def _get_status_display(self, result: PingResult) -> str:
        """Get status icon for a host."""
        if result.is_online:
            return "[green]● UP[/green]"
        return "[red]● DOWN[/red]"

    def action_cursor_down(self) -> None:
        """Move cursor down in the table."""
        self.query_one(DataTable).action_cursor_down()

    def action_cursor_up(self) -> None:
        """Move cursor up in the table."""
        self.query_one(DataTable).action_cursor_up()

    def action_toggle_offline(self) -> None:
        """Show or hide hosts that did not answer."""
        self._show_offline = not self._show_offline
        self._render_table()

    def action_copy_ip(self) -> None:
        """Copy the selected host's IP address to clipboard."""
        cursor_row = self.query_one(DataTable).cursor_row
        if cursor_row is None or cursor_row >= len(self._addresses):
            return

        address = self._addresses[cursor_row]
        if self._copy_to_clipboard(address):
            self.query_one("#results-copy-status", Label).update(
                f"[green]Copied IP: {address}[/green]"
            )
            self.set_timer(2, self._clear_copy_status)

    def _clear_copy_status(self) -> None:
        self.query_one("#results-copy-status", Label).update("")

    def _copy_to_clipboard(self, text: str) -> bool:
        """Copy text to system clipboard."""
        if sys.platform == "darwin":
            commands = [["pbcopy"]]
        elif sys.platform == "win32":
            commands = [["clip"]]
        else:
            commands = [["xclip", "-selection", "clipboard"], ["xsel", "--clipboard", "--input"]]

        for cmd in commands:
            try:
                subprocess.run(cmd, input=text.encode(), check=True, capture_output=True)
                return True
            except (FileNotFoundError, subprocess.CalledProcessError) as e:
                logger.debug(f"Clipboard command {cmd[0]} failed: {e}")
        return False

