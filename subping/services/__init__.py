"""Services for enumerating subnets and pinging hosts."""

from .mock_pinger import MockPinger
from .pinger import Pinger, PingError, is_ci_environment, new_pinger, run_ping
from .real_pinger import RealPinger
from .scanner import ScanState, SubnetScanner, calculate_max_partition_size
from .subnet import SubnetHostsIterator

__all__ = [
    "MockPinger",
    "PingError",
    "Pinger",
    "RealPinger",
    "ScanState",
    "SubnetHostsIterator",
    "SubnetScanner",
    "calculate_max_partition_size",
    "is_ci_environment",
    "new_pinger",
    "run_ping",
]
