"""Ping and subnet scan result models."""

import ipaddress
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class HostStatus(str, Enum):
    """Reachability of a probed host."""

    UP = "up"
    DOWN = "down"


class PingResult(BaseModel):
    """Aggregate statistics of one echo exchange with a host.

    A result with nothing sent or received is also what a failed probe
    degrades to, so the two cannot be told apart from the result alone.
    """

    avg_rtt: float = 0.0  # Seconds
    packet_loss: float = Field(default=0.0, ge=0.0, le=100.0)  # Percent
    packets_sent: int = Field(default=0, ge=0)
    packets_recv: int = Field(default=0, ge=0)
    packets_recv_duplicates: int = Field(default=0, ge=0)

    @property
    def is_online(self) -> bool:
        """Return whether the host answered at least once."""
        return self.packets_recv > 0

    @property
    def status(self) -> HostStatus:
        return HostStatus.UP if self.is_online else HostStatus.DOWN

    @property
    def avg_rtt_ms(self) -> float:
        """Average round-trip time in milliseconds."""
        return self.avg_rtt * 1000.0


class PingStatistics(PingResult):
    """Full statistics of an echo exchange, including RTT spread."""

    min_rtt: float = 0.0
    max_rtt: float = 0.0
    stddev_rtt: float = 0.0

    def to_result(self) -> PingResult:
        """Drop the spread fields."""
        return PingResult(**self.model_dump(include=set(PingResult.model_fields)))


def address_sort_key(address: str) -> tuple[int, int]:
    """Sort key placing IPv4 before IPv6, each in numeric order."""
    ip = ipaddress.ip_address(address)
    return (ip.version, int(ip))


class ScanReport(BaseModel):
    """Result of a completed subnet scan."""

    subnet: str
    first_ip: str = ""
    last_ip: str = ""
    total_hosts: int = 0
    results: dict[str, PingResult] = Field(default_factory=dict)
    scan_time: datetime = Field(default_factory=datetime.now)
    duration_seconds: float = 0.0

    @property
    def online_hosts(self) -> dict[str, PingResult]:
        """Hosts that answered at least one echo request."""
        return {ip: r for ip, r in self.results.items() if r.is_online}

    @property
    def hosts_up(self) -> int:
        """Count of hosts that are up."""
        return sum(1 for r in self.results.values() if r.is_online)

    @property
    def hosts_down(self) -> int:
        """Count of probed hosts that never answered."""
        return len(self.results) - self.hosts_up

    def sorted_addresses(self, online_only: bool = True) -> list[str]:
        """Return result addresses in numeric order for display."""
        source = self.online_hosts if online_only else self.results
        return sorted(source, key=address_sort_key)
