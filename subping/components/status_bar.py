"""Status bar component showing scan status and keyboard hints."""

from datetime import datetime

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Static


class StatusBar(Horizontal):
    """Bottom status bar with time, last scan info, and keyboard hints."""

    DEFAULT_CSS = """
    StatusBar {
        height: 1;
        background: $surface-darken-1;
        color: $text-muted;
        padding: 0 1;
        width: 100%;
    }

    StatusBar #status-time {
        width: auto;
    }

    StatusBar #status-scan {
        width: auto;
        padding-left: 2;
    }

    StatusBar #status-activity {
        width: auto;
        padding-left: 2;
        color: $warning;
    }

    StatusBar #status-spacer {
        width: 1fr;
    }

    StatusBar #status-hints {
        width: auto;
        text-align: right;
    }
    """

    def __init__(self) -> None:
        super().__init__()
        self._last_scan: datetime | None = None

    def compose(self) -> ComposeResult:
        yield Static("", id="status-time")
        yield Static("", id="status-scan")
        yield Static("", id="status-activity")
        yield Static("", id="status-spacer")
        yield Static(
            "[dim]r[/dim] Rescan  [dim]o[/dim] Offline  [dim]c[/dim] Copy  [dim]q[/dim] Quit",
            id="status-hints",
        )

    def on_mount(self) -> None:
        """Start clock update timer."""
        self.set_interval(1, self._update_time)

    def _update_time(self) -> None:
        """Update the current time display."""
        now = datetime.now()
        self.query_one("#status-time", Static).update(f"[bold]{now.strftime('%H:%M:%S')}[/bold]")

        if self._last_scan:
            minutes = int((now - self._last_scan).total_seconds() // 60)
            if minutes == 0:
                scan_text = "Scanned just now"
            elif minutes == 1:
                scan_text = "Scanned 1 min ago"
            else:
                scan_text = f"Scanned {minutes} mins ago"
            self.query_one("#status-scan", Static).update(f"[dim]{scan_text}[/dim]")

    def set_last_scan(self, time: datetime | None = None) -> None:
        """Update the last scan timestamp."""
        self._last_scan = time or datetime.now()
        self._update_time()

    def set_activity(self, activity: str) -> None:
        """Set current activity message (e.g., 'Pinging...')."""
        self.query_one("#status-activity", Static).update(
            f"[yellow]{activity}[/yellow]" if activity else ""
        )

    def clear_activity(self) -> None:
        """Clear activity message."""
        self.set_activity("")
