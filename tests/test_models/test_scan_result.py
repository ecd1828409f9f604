"""Tests for scan result models."""

import pytest
from pydantic import ValidationError

from subping.models.scan_result import (
    HostStatus,
    PingResult,
    PingStatistics,
    ScanReport,
    address_sort_key,
)


class TestPingResult:
    """Tests for PingResult model."""

    def test_zero_value(self):
        """Test that the default result is the empty failure shape."""
        result = PingResult()
        assert result.avg_rtt == 0.0
        assert result.packet_loss == 0.0
        assert result.packets_sent == 0
        assert result.packets_recv == 0
        assert result.packets_recv_duplicates == 0
        assert result.is_online is False
        assert result.status == HostStatus.DOWN

    def test_online(self):
        """Test a host that answered."""
        result = PingResult(avg_rtt=0.0125, packets_sent=3, packets_recv=2, packet_loss=33.3)
        assert result.is_online is True
        assert result.status == HostStatus.UP
        assert result.avg_rtt_ms == pytest.approx(12.5)

    def test_loss_bounds(self):
        """Test that loss must be a percentage."""
        with pytest.raises(ValidationError):
            PingResult(packet_loss=150.0)


class TestPingStatistics:
    """Tests for PingStatistics model."""

    def test_to_result_drops_spread(self):
        """Test conversion to the plain result shape."""
        stats = PingStatistics(
            avg_rtt=0.02,
            min_rtt=0.01,
            max_rtt=0.03,
            stddev_rtt=0.005,
            packets_sent=4,
            packets_recv=4,
        )
        result = stats.to_result()
        assert type(result) is PingResult
        assert result.avg_rtt == 0.02
        assert result.packets_recv == 4
        assert not hasattr(result, "min_rtt")


class TestAddressSortKey:
    """Tests for numeric address ordering."""

    def test_numeric_not_lexical(self):
        """Test that 10 sorts after 9."""
        addresses = ["192.168.0.10", "192.168.0.9", "192.168.0.100"]
        assert sorted(addresses, key=address_sort_key) == [
            "192.168.0.9",
            "192.168.0.10",
            "192.168.0.100",
        ]

    def test_ipv4_before_ipv6(self):
        """Test that IPv4 addresses sort before IPv6."""
        assert sorted(["::1", "255.255.255.255"], key=address_sort_key) == [
            "255.255.255.255",
            "::1",
        ]


class TestScanReport:
    """Tests for ScanReport computed properties."""

    @pytest.fixture
    def sample_report(self):
        """Create a report with a mix of online and offline hosts."""
        return ScanReport(
            subnet="10.0.0.0/29",
            first_ip="10.0.0.0",
            last_ip="10.0.0.7",
            total_hosts=8,
            results={
                "10.0.0.10": PingResult(packets_sent=1, packets_recv=1),
                "10.0.0.2": PingResult(packets_sent=1, packets_recv=1),
                "10.0.0.3": PingResult(packets_sent=1, packets_recv=0, packet_loss=100.0),
                "10.0.0.4": PingResult(),
            },
        )

    def test_hosts_up(self, sample_report):
        """Test hosts_up counts answering hosts."""
        assert sample_report.hosts_up == 2

    def test_hosts_down(self, sample_report):
        """Test hosts_down counts silent and failed hosts."""
        assert sample_report.hosts_down == 2

    def test_online_hosts(self, sample_report):
        """Test online_hosts returns only answering hosts."""
        assert set(sample_report.online_hosts) == {"10.0.0.2", "10.0.0.10"}

    def test_sorted_addresses(self, sample_report):
        """Test display ordering of results."""
        assert sample_report.sorted_addresses() == ["10.0.0.2", "10.0.0.10"]
        assert sample_report.sorted_addresses(online_only=False) == [
            "10.0.0.2",
            "10.0.0.3",
            "10.0.0.4",
            "10.0.0.10",
        ]

    def test_empty_report(self):
        """Test properties on empty report."""
        report = ScanReport(subnet="10.0.0.0/30")
        assert report.hosts_up == 0
        assert report.hosts_down == 0
        assert report.online_hosts == {}
        assert report.sorted_addresses() == []
