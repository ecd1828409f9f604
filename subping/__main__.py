"""Entry point for running subping as a module."""

import argparse
import atexit
import logging
import re
import signal
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pydantic import ValidationError

from .models.config import Config, ScanOptions
from .models.scan_result import ScanReport
from .services.pinger import new_pinger
from .services.real_pinger import RealPinger
from .services.scanner import SubnetScanner

# Global reference for signal handlers
_app = None
_logger = logging.getLogger(__name__)

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)\s*(ms|s|m)?\s*$")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, None: 1.0}

EXIT_CONFIG_ERROR = 2


def parse_duration(value: str) -> float:
    """Parse '300ms', '2s', '1m' or bare seconds into float seconds."""
    match = _DURATION_RE.match(value)
    if not match:
        raise argparse.ArgumentTypeError(f"invalid duration: {value!r}")
    return float(match.group(1)) * _DURATION_UNITS[match.group(2)]


def setup_logging(log_level: str = "ERROR") -> None:
    """Configure logging with rotation support.

    Args:
        log_level: The logging level (DEBUG, INFO, WARNING, ERROR)
    """
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    log_dir = Path("logs")
    try:
        log_dir.mkdir(exist_ok=True)
        # Rotate at 10MB, keep 5 backup files
        file_handler = RotatingFileHandler(
            log_dir / "subping.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        handlers.append(file_handler)
    except (PermissionError, OSError):
        pass  # Skip file logging if we can't write

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def _signal_handler(signum: int, frame: object) -> None:
    """Handle shutdown signals gracefully.

    Args:
        signum: Signal number received
        frame: Current stack frame (unused)
    """
    signal_name = signal.Signals(signum).name
    _logger.info(f"Received {signal_name}, shutting down gracefully...")

    if _app is not None:
        _app.exit()


def _cleanup() -> None:
    """Cleanup handler called on exit."""
    _logger.info("subping shutdown complete")


def setup_signal_handlers() -> None:
    """Set up signal handlers for graceful shutdown."""
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)
    atexit.register(_cleanup)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subping",
        description="Ping every address of a subnet concurrently and list the hosts that answer",
    )
    parser.add_argument("subnet", nargs="?", help="Network subnet in CIDR notation, e.g. 192.168.1.0/24")
    parser.add_argument(
        "-c",
        "--count",
        type=int,
        help="Number of ping attempts for each IP address (default: 3)",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=parse_duration,
        help="Time between ping attempts, e.g. 100ms (default: 0)",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=parse_duration,
        help="Maximum ping timeout per host, e.g. 300ms (default: 300ms)",
    )
    parser.add_argument(
        "-n",
        "--workers",
        type=int,
        help="Maximum number of concurrent ping workers (default: number of CPUs)",
    )
    parser.add_argument(
        "--pinger",
        choices=["auto", "real", "mock"],
        help="Ping implementation; 'auto' uses the mock pinger under CI (default: auto)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to a JSON configuration file (default: subping.json if present)",
    )
    parser.add_argument("--all", action="store_true", help="Also list hosts that did not answer")
    parser.add_argument("--tui", action="store_true", help="Show results in an interactive terminal UI")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("-V", "--version", action="store_true", help="Show version and exit")
    return parser


def build_options(args: argparse.Namespace, config: Config) -> ScanOptions:
    """Merge command line flags over configuration file settings."""
    settings = config.settings
    return ScanOptions(
        subnet=args.subnet or "",
        count=args.count if args.count is not None else settings.count,
        interval=args.interval if args.interval is not None else settings.interval,
        timeout=args.timeout if args.timeout is not None else settings.timeout,
        max_workers=args.workers if args.workers is not None else settings.max_workers,
    )


def print_report(report: ScanReport, show_all: bool = False) -> None:
    """Print the results table of a completed scan."""
    for address in report.sorted_addresses(online_only=not show_all):
        result = report.results[address]
        latency = f"{result.avg_rtt_ms:.3f}ms" if result.is_online else "offline"
        print(f"| {address:<39} | {latency:<15} |")
    print("-" * 63)
    print(f"Online hosts\t: {report.hosts_up}")
    print(f"Offline hosts\t: {report.hosts_down}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    global _app

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        from . import __version__

        print(f"subping v{__version__}")
        return 0

    try:
        config = Config.load(args.config) if args.config else Config.load_or_default()
    except (FileNotFoundError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    setup_logging("DEBUG" if args.verbose else config.settings.log_level)

    try:
        options = build_options(args, config)
        pinger = new_pinger(args.pinger or config.settings.pinger, config.mock)
        # Rejects a bad subnet up front; the TUI builds its own scanner per scan
        scanner = SubnetScanner(options, pinger)
    except (ValidationError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_CONFIG_ERROR

    if isinstance(pinger, RealPinger) and not pinger.available:
        print(f"Warning: {pinger.get_status_message()}", file=sys.stderr)

    if args.tui:
        from .app import ScanApp

        setup_signal_handlers()
        _app = ScanApp(options, pinger)
        _app.run()
        return 0

    start = time.monotonic()
    targets = scanner.targets
    print(f"Network\t\t: {targets.network}")
    print(f"IP Ranges\t: {targets.first_address} - {targets.last_address}")
    print(f"Total hosts\t: {targets.total_hosts}")
    print("-" * 63)
    print(f"| {'IP Address':<39} | {'Avg Latency':<15} |")
    print("-" * 63)
    print("Pinging...", end="", flush=True)

    scanner.run()

    print("\r", end="")
    print_report(scanner.report(), show_all=args.all)
    print(f"Execution time: {time.monotonic() - start:.3f}s")
    return 0


if __name__ == "__main__":
    sys.exit(main())
