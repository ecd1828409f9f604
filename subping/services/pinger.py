"""Probe abstraction shared by the real and mock pingers."""

import logging
import os
from typing import Protocol, runtime_checkable

from ..models.config import MockPingerConfig, PingerKind
from ..models.scan_result import PingResult, PingStatistics

logger = logging.getLogger(__name__)

# Environment variables set by common CI systems
CI_ENV_VARS = (
    "CI",
    "GITHUB_ACTIONS",
    "CONTINUOUS_INTEGRATION",
    "TRAVIS",
    "CIRCLECI",
    "JENKINS_URL",
    "GITLAB_CI",
    "APPVEYOR",
    "CI_NAME",
    "BUILDKITE",
    "SEMAPHORE",
)


class PingError(Exception):
    """A probe could not be built or the echo exchange failed outright."""


@runtime_checkable
class Pinger(Protocol):
    """Performs one echo exchange with a host."""

    def ping(self, ip_address: str, count: int, interval: float, timeout: float) -> PingResult:
        """Send `count` echo requests `interval` seconds apart.

        Raises:
            PingError: if the probe cannot be performed.
        """
        ...


def is_ci_environment() -> bool:
    """Check whether the process runs under a CI system."""
    return any(os.environ.get(var) for var in CI_ENV_VARS)


def new_pinger(kind: PingerKind = "auto", mock_config: MockPingerConfig | None = None) -> Pinger:
    """Build a pinger by name.

    "auto" picks the mock pinger under CI, where raw sockets are usually
    unavailable, and the real one otherwise.
    """
    from .mock_pinger import MockPinger
    from .real_pinger import RealPinger

    if kind == "auto":
        kind = "mock" if is_ci_environment() else "real"
        logger.debug(f"Auto-selected {kind} pinger")

    if kind == "mock":
        return MockPinger(mock_config)
    if kind == "real":
        return RealPinger()
    raise ValueError(f"Unknown pinger kind: {kind!r}")


def run_ping(ip_address: str, count: int, interval: float, timeout: float) -> PingStatistics:
    """Ping one host for real, returning empty statistics on failure."""
    from .real_pinger import RealPinger

    try:
        return RealPinger().statistics(ip_address, count, interval, timeout)
    except PingError as e:
        logger.debug(f"Ping failed for {ip_address}: {e}")
        return PingStatistics()
