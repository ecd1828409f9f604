"""Concurrent ICMP ping sweep of every address in a subnet."""

__version__ = "0.1.0"

from .models import PingResult, ScanOptions, ScanReport
from .services import MockPinger, PingError, RealPinger, SubnetScanner, new_pinger

__all__ = [
    "MockPinger",
    "PingError",
    "PingResult",
    "RealPinger",
    "ScanOptions",
    "ScanReport",
    "SubnetScanner",
    "__version__",
    "new_pinger",
]
