"""Deterministic pinger for tests and hosts without raw socket access."""

import ipaddress
import logging
import threading
import time

from ..models.config import MockHostConfig, MockPingerConfig
from ..models.scan_result import PingResult
from .pinger import PingError

logger = logging.getLogger(__name__)

LOCALHOST = "localhost"
LOOPBACK_LATENCY = 0.001
PUBLIC_LATENCY = 0.050
PUBLIC_PACKET_LOSS = 0.1

PRIVATE_RANGES = [
    ipaddress.ip_network("10.0.0.0/8"),  # RFC 1918
    ipaddress.ip_network("172.16.0.0/12"),  # RFC 1918
    ipaddress.ip_network("192.168.0.0/16"),  # RFC 1918
    ipaddress.ip_network("fc00::/7"),  # Unique local
    ipaddress.ip_network("fe80::/10"),  # Link-local
]


class MockPinger:
    """Pinger returning canned results by address class, with per-host overrides.

    Loopback addresses answer in 1 ms with no loss, private ranges use the
    configured defaults, and everything else gets 50 ms and 10% loss.
    """

    def __init__(self, config: MockPingerConfig | None = None):
        self.config = config.model_copy(deep=True) if config else MockPingerConfig()
        self._lock = threading.Lock()

    def ping(self, ip_address: str, count: int, interval: float, timeout: float) -> PingResult:
        if self.config.simulate_timing:
            time.sleep(0.001)

        ip = self._parse(ip_address)
        if ip is None and ip_address != LOCALHOST:
            raise PingError("invalid IP address")

        host_config = self.get_host_config(ip_address)
        if host_config is not None:
            if host_config.should_error:
                logger.debug(f"Forced failure for {ip_address}")
                raise PingError(host_config.error_msg)
            return self._calculate_result(count, host_config.latency, host_config.packet_loss)

        if self.is_localhost(ip_address):
            return self._calculate_result(count, LOOPBACK_LATENCY, 0.0)

        if self.is_private_ip(ip_address):
            return self._calculate_result(
                count, self.config.default_latency, self.config.default_packet_loss
            )

        return self._calculate_result(count, PUBLIC_LATENCY, PUBLIC_PACKET_LOSS)

    def set_host_config(self, ip_address: str, config: MockHostConfig) -> None:
        """Override the behaviour for one host."""
        with self._lock:
            self.config.host_configs[ip_address] = config

    def get_host_config(self, ip_address: str) -> MockHostConfig | None:
        with self._lock:
            return self.config.host_configs.get(ip_address)

    def clear_host_configs(self) -> None:
        """Remove all per-host overrides."""
        with self._lock:
            self.config.host_configs = {}

    @staticmethod
    def _parse(ip_address: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
        try:
            ip = ipaddress.ip_address(ip_address)
        except ValueError:
            return None
        # ::ffff:a.b.c.d is classified as the IPv4 address it carries
        if ip.version == 6 and ip.ipv4_mapped is not None:
            return ip.ipv4_mapped
        return ip

    def is_localhost(self, ip_address: str) -> bool:
        if ip_address == LOCALHOST:
            return True
        ip = self._parse(ip_address)
        return ip is not None and ip.is_loopback

    def is_private_ip(self, ip_address: str) -> bool:
        ip = self._parse(ip_address)
        if ip is None:
            return False
        return any(ip.version == net.version and ip in net for net in PRIVATE_RANGES)

    @staticmethod
    def _calculate_result(count: int, latency: float, packet_loss: float) -> PingResult:
        """Build statistics for `count` requests at the given loss ratio."""
        packets_recv = max(int(count * (1.0 - packet_loss)), 0)
        return PingResult(
            avg_rtt=latency,
            packet_loss=packet_loss * 100.0,
            packets_sent=count,
            packets_recv=packets_recv,
            packets_recv_duplicates=0,
        )
