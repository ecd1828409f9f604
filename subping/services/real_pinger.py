"""ICMP echo pinger using scapy raw sockets."""

import ipaddress
import logging
import os
import random
import socket
import statistics as stats

from ..models.scan_result import PingResult, PingStatistics
from .pinger import PingError

logger = logging.getLogger(__name__)

# Reply wait used when the caller sets no explicit timeout
DEFAULT_REPLY_TIMEOUT = 1.0


class RealPinger:
    """Pinger sending real ICMP/ICMPv6 echo requests with scapy."""

    def __init__(self):
        self._scapy_available = self._check_scapy()
        self._has_privileges = self._check_privileges()

    def _check_scapy(self) -> bool:
        """Check if scapy is importable."""
        try:
            from scapy.all import conf  # noqa: F401

            return True
        except ImportError:
            logger.warning("scapy not installed - real pinging disabled")
            return False
        except Exception as e:
            logger.warning(f"scapy error: {e}")
            return False

    def _check_privileges(self) -> bool:
        """Check if we have root/admin privileges for raw socket access."""
        if hasattr(os, "geteuid"):
            return os.geteuid() == 0
        # On Windows scapy reports the failure itself
        return True

    @property
    def has_privileges(self) -> bool:
        return self._has_privileges

    @property
    def available(self) -> bool:
        """Return whether real pinging is possible."""
        return self._scapy_available and self._has_privileges

    def get_status_message(self) -> str | None:
        """Get a status message about pinger availability."""
        if not self._scapy_available:
            return "scapy not installed - real pinging disabled"
        if not self._has_privileges:
            return "Run with sudo for ICMP pinging, or use the mock pinger"
        return None

    def ping(self, ip_address: str, count: int, interval: float, timeout: float) -> PingResult:
        return self.statistics(ip_address, count, interval, timeout).to_result()

    def statistics(
        self, ip_address: str, count: int, interval: float, timeout: float
    ) -> PingStatistics:
        """Run the echo exchange and return full statistics.

        Raises:
            PingError: if the pinger is unavailable, the target cannot be
                resolved, or sending fails.
        """
        if not self.available:
            raise PingError(self.get_status_message() or "pinger unavailable")

        target = self._resolve(ip_address)
        count, wait = self._fit_to_timeout(count, interval, timeout)
        packets = self._build_requests(target, count)

        from scapy.all import sr
        from scapy.error import Scapy_Exception

        try:
            answered, _ = sr(packets, inter=interval, timeout=wait, multi=True, verbose=0)
        except PermissionError as e:
            raise PingError(f"Permission denied pinging {ip_address}: {e}") from e
        except (OSError, Scapy_Exception) as e:
            logger.debug(f"Failed to ping the address {ip_address}: {e}")
            raise PingError(f"Failed to ping {ip_address}: {e}") from e

        return self._reduce(answered, len(packets))

    @staticmethod
    def _fit_to_timeout(count: int, interval: float, timeout: float) -> tuple[int, float]:
        """Trim the request count so the whole exchange ends within timeout.

        Returns the number of requests to send and how long to keep
        listening after the last one.
        """
        if timeout <= 0:
            return count, DEFAULT_REPLY_TIMEOUT

        if interval > 0:
            count = max(min(count, int(timeout // interval) + 1), 1)
        wait = max(timeout - (count - 1) * interval, 0.0)
        return count, wait

    def _resolve(self, ip_address: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address:
        """Turn an address literal or hostname into an IP address."""
        try:
            return ipaddress.ip_address(ip_address)
        except ValueError:
            pass

        try:
            infos = socket.getaddrinfo(ip_address, None)
        except (socket.gaierror, UnicodeError) as e:
            logger.debug(f"Failed to resolve {ip_address}: {e}")
            raise PingError(f"cannot resolve {ip_address!r}") from e

        if not infos:
            raise PingError(f"cannot resolve {ip_address!r}")
        return ipaddress.ip_address(infos[0][4][0])

    def _build_requests(self, target, count: int) -> list:
        """One echo request per sequence number, all sharing an identifier."""
        from scapy.all import ICMP, IP, ICMPv6EchoRequest, IPv6

        ident = random.randint(1, 0xFFFF)
        dst = str(target)
        if target.version == 6:
            return [IPv6(dst=dst) / ICMPv6EchoRequest(id=ident, seq=seq) for seq in range(count)]
        return [IP(dst=dst) / ICMP(id=ident, seq=seq) for seq in range(count)]

    @staticmethod
    def _reduce(answered, packets_sent: int) -> PingStatistics:
        """Reduce request/reply pairs into statistics.

        The first reply to each sequence number counts as received; any
        later reply to the same sequence number is a duplicate.
        """
        seen: set[int] = set()
        rtts: list[float] = []
        duplicates = 0

        for sent, received in answered:
            seq = int(sent.lastlayer().seq)
            if seq in seen:
                duplicates += 1
                continue
            seen.add(seq)
            rtts.append(max(float(received.time) - float(sent.sent_time), 0.0))

        packets_recv = len(seen)
        loss = (packets_sent - packets_recv) / packets_sent * 100.0 if packets_sent else 0.0

        return PingStatistics(
            avg_rtt=stats.fmean(rtts) if rtts else 0.0,
            min_rtt=min(rtts, default=0.0),
            max_rtt=max(rtts, default=0.0),
            stddev_rtt=stats.pstdev(rtts) if len(rtts) > 1 else 0.0,
            packet_loss=loss,
            packets_sent=packets_sent,
            packets_recv=packets_recv,
            packets_recv_duplicates=duplicates,
        )
