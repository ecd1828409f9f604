"""Data models for subnet scanning."""

from .config import Config, MockHostConfig, MockPingerConfig, ScanOptions, Settings
from .scan_result import HostStatus, PingResult, PingStatistics, ScanReport

__all__ = [
    "Config",
    "HostStatus",
    "MockHostConfig",
    "MockPingerConfig",
    "PingResult",
    "PingStatistics",
    "ScanOptions",
    "ScanReport",
    "Settings",
]
