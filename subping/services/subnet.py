"""Subnet host enumeration over fixed-length IPv4/IPv6 addresses."""

import ipaddress
import threading
from collections.abc import Iterable
from typing import Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]
IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


def parse_cidr(cidr: str) -> IPNetwork:
    """Parse CIDR notation, masking off any host bits."""
    try:
        return ipaddress.ip_network(cidr.strip(), strict=False)
    except (ValueError, AttributeError) as e:
        raise ValueError(f"failed to parse CIDR notation: {cidr!r}") from e


def calculate_total_hosts(network: IPNetwork) -> int:
    """Number of addresses in the network, network and broadcast included."""
    host_bits = network.max_prefixlen - network.prefixlen
    return 2**host_bits


def calculate_total_hosts_from_cidr(cidr: str) -> int:
    return calculate_total_hosts(parse_cidr(cidr))


def get_first_ip(network: IPNetwork) -> bytes:
    """Network address as packed bytes."""
    return network.network_address.packed


def get_last_ip(network: IPNetwork) -> bytes:
    """Network address with every host bit set, as packed bytes."""
    mask = network.netmask.packed
    return bytes(b | (~m & 0xFF) for b, m in zip(network.network_address.packed, mask))


def increment_address(buf: bytearray) -> bool:
    """Add one to a big-endian address in place.

    Returns True when the carry ran off the most significant byte, i.e. the
    address wrapped around to all zeros.
    """
    for i in range(len(buf) - 1, -1, -1):
        buf[i] = (buf[i] + 1) & 0xFF
        if buf[i] != 0:
            return False
    return True


def find_ips_outside_subnet(addresses: Iterable[IPAddress], network: IPNetwork) -> list[IPAddress]:
    """Return the addresses that do not belong to the network."""
    return [ip for ip in addresses if ip.version != network.version or ip not in network]


class SubnetHostsIterator:
    """Single-pass iterator over every address of a subnet, in ascending order."""

    def __init__(self, network: IPNetwork):
        self.network = network
        self.first_ip = get_first_ip(network)
        self.last_ip = get_last_ip(network)
        self.total_hosts = calculate_total_hosts(network)
        self._mask = network.netmask.packed
        self._current: bytearray | None = None
        self._exhausted = False
        self._lock = threading.Lock()

    @classmethod
    def from_cidr(cls, cidr: str) -> "SubnetHostsIterator":
        """Create an iterator for a CIDR string like '192.168.1.0/24'."""
        return cls(parse_cidr(cidr))

    def _contains(self, packed: bytearray) -> bool:
        return all((b & m) == n for b, m, n in zip(packed, self._mask, self.first_ip))

    def _to_address(self, packed: bytearray) -> IPAddress:
        return ipaddress.ip_address(bytes(packed))

    def next(self) -> IPAddress | None:
        """Return the next host address, or None once the subnet is exhausted."""
        with self._lock:
            if self._exhausted:
                return None

            if self._current is None:
                self._current = bytearray(self.first_ip)
                return self._to_address(self._current)

            wrapped = increment_address(self._current)
            if wrapped or not self._contains(self._current):
                self._exhausted = True
                return None

            return self._to_address(self._current)

    def __iter__(self) -> "SubnetHostsIterator":
        return self

    def __next__(self) -> IPAddress:
        ip = self.next()
        if ip is None:
            raise StopIteration
        return ip

    @property
    def first_address(self) -> IPAddress:
        return ipaddress.ip_address(self.first_ip)

    @property
    def last_address(self) -> IPAddress:
        return ipaddress.ip_address(self.last_ip)

    def __repr__(self) -> str:
        return f"SubnetHostsIterator({self.network}, total_hosts={self.total_hosts})"
