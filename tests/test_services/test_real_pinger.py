"""Tests for the scapy-based pinger, with packet I/O replaced by fakes."""

import pytest
from scapy.all import ICMP, IP, ICMPv6EchoReply, IPv6

from subping.models.scan_result import PingResult, PingStatistics
from subping.services.pinger import PingError
from subping.services.real_pinger import DEFAULT_REPLY_TIMEOUT, RealPinger


def reply_for(request):
    """Build the echo reply scapy would match to a request."""
    echo = request.lastlayer()
    if IPv6 in request:
        return IPv6(src=request[IPv6].dst) / ICMPv6EchoReply(id=echo.id, seq=echo.seq)
    return IP(src=request[IP].dst) / ICMP(type=0, id=echo.id, seq=echo.seq)


class FakeSr:
    """Stand-in for scapy.all.sr answering selected sequence numbers."""

    def __init__(self, answer_seqs=None, duplicate_seqs=(), rtt=0.010, error=None):
        self.answer_seqs = answer_seqs
        self.duplicate_seqs = duplicate_seqs
        self.rtt = rtt
        self.error = error
        self.calls = []

    def __call__(self, packets, **kwargs):
        self.calls.append((packets, kwargs))
        if self.error:
            raise self.error

        answered = []
        for i, request in enumerate(packets):
            request.sent_time = 100.0 + i
            seq = request.lastlayer().seq
            if self.answer_seqs is not None and seq not in self.answer_seqs:
                continue
            copies = 2 if seq in self.duplicate_seqs else 1
            for _ in range(copies):
                reply = reply_for(request)
                reply.time = request.sent_time + self.rtt * (seq + 1)
                answered.append((request, reply))
        return answered, []


@pytest.fixture
def pinger(monkeypatch):
    """Real pinger that believes it has raw socket privileges."""
    monkeypatch.setattr(RealPinger, "_check_privileges", lambda self: True)
    return RealPinger()


@pytest.fixture
def fake_sr(monkeypatch):
    def install(**kwargs):
        fake = FakeSr(**kwargs)
        monkeypatch.setattr("scapy.all.sr", fake)
        return fake

    return install


class TestRealPingerAvailability:
    """Tests for privilege and availability checks."""

    def test_unprivileged_raises(self, monkeypatch):
        """Test pinging without privileges fails with a hint."""
        monkeypatch.setattr(RealPinger, "_check_privileges", lambda self: False)
        pinger = RealPinger()
        assert pinger.available is False
        assert "sudo" in pinger.get_status_message()
        with pytest.raises(PingError, match="sudo"):
            pinger.ping("127.0.0.1", 1, 0.0, 1.0)

    def test_privileged_available(self, pinger):
        assert pinger.available is True
        assert pinger.has_privileges is True
        assert pinger.get_status_message() is None


class TestRealPingerExchange:
    """Tests for request building and reply reduction."""

    def test_all_answered(self, pinger, fake_sr):
        """Test a host answering every request."""
        fake = fake_sr()
        stats = pinger.statistics("192.0.2.1", 3, 0.2, 2.0)

        assert isinstance(stats, PingStatistics)
        assert stats.packets_sent == 3
        assert stats.packets_recv == 3
        assert stats.packet_loss == 0.0
        assert stats.packets_recv_duplicates == 0
        assert stats.min_rtt == pytest.approx(0.010)
        assert stats.max_rtt == pytest.approx(0.030)
        assert stats.avg_rtt == pytest.approx(0.020)
        assert stats.stddev_rtt > 0

        packets, kwargs = fake.calls[0]
        assert kwargs["inter"] == 0.2
        assert kwargs["timeout"] == pytest.approx(1.6)
        assert kwargs["multi"] is True
        assert [p[ICMP].seq for p in packets] == [0, 1, 2]
        assert len({p[ICMP].id for p in packets}) == 1
        assert all(p[IP].dst == "192.0.2.1" for p in packets)

    def test_partial_loss(self, pinger, fake_sr):
        """Test loss percentage is (sent - received) / sent."""
        fake_sr(answer_seqs={0})
        stats = pinger.statistics("192.0.2.1", 4, 0.0, 1.0)
        assert stats.packets_recv == 1
        assert stats.packet_loss == 75.0

    def test_no_answer(self, pinger, fake_sr):
        """Test an unreachable host is total loss, not an error."""
        fake_sr(answer_seqs=set())
        result = pinger.ping("192.0.2.1", 2, 0.0, 1.0)
        assert result.packets_sent == 2
        assert result.packets_recv == 0
        assert result.packet_loss == 100.0
        assert result.avg_rtt == 0.0

    def test_duplicates_counted(self, pinger, fake_sr):
        """Test repeated replies to a sequence number count as duplicates."""
        fake_sr(duplicate_seqs={1})
        stats = pinger.statistics("192.0.2.1", 2, 0.0, 1.0)
        assert stats.packets_recv == 2
        assert stats.packets_recv_duplicates == 1

    def test_ping_returns_plain_result(self, pinger, fake_sr):
        fake_sr()
        result = pinger.ping("192.0.2.1", 1, 0.0, 1.0)
        assert type(result) is PingResult
        assert result.packets_recv == 1

    def test_zero_timeout_uses_default_wait(self, pinger, fake_sr):
        """Test that no explicit timeout still bounds the reply wait."""
        fake = fake_sr()
        pinger.ping("192.0.2.1", 1, 0.0, 0)
        assert fake.calls[0][1]["timeout"] == DEFAULT_REPLY_TIMEOUT

    def test_zero_timeout_sends_every_request(self, pinger, fake_sr):
        fake = fake_sr()
        stats = pinger.statistics("192.0.2.1", 5, 1.0, 0)
        assert len(fake.calls[0][0]) == 5
        assert stats.packets_sent == 5

    @pytest.mark.parametrize(
        "count, interval, timeout, expected_sent",
        [
            (5, 1.0, 0.3, 1),
            (5, 0.1, 0.35, 4),
            (3, 0.5, 10.0, 3),
            (4, 0.0, 0.3, 4),
        ],
    )
    def test_exchange_fits_within_timeout(
        self, pinger, fake_sr, count, interval, timeout, expected_sent
    ):
        """Test the send time plus the reply wait never exceeds the timeout."""
        fake = fake_sr()
        stats = pinger.statistics("10.0.0.1", count, interval, timeout)

        packets, kwargs = fake.calls[0]
        assert len(packets) == expected_sent
        assert (len(packets) - 1) * kwargs["inter"] + kwargs["timeout"] <= timeout + 1e-9
        assert stats.packets_sent == expected_sent

    def test_loss_counts_only_requests_sent(self, pinger, fake_sr):
        """Test requests dropped to fit the timeout do not count as lost."""
        fake_sr(answer_seqs=set())
        stats = pinger.statistics("10.0.0.1", 5, 1.0, 1.5)
        assert stats.packets_sent == 2
        assert stats.packet_loss == 100.0

    def test_ipv6_requests(self, pinger, fake_sr):
        """Test IPv6 targets use ICMPv6 echo requests."""
        fake = fake_sr()
        stats = pinger.statistics("2001:db8::1", 2, 0.0, 1.0)
        packets, _ = fake.calls[0]
        assert all(IPv6 in p for p in packets)
        assert stats.packets_recv == 2

    def test_hostname_resolved(self, pinger, fake_sr, monkeypatch):
        """Test hostnames are resolved before building requests."""
        fake = fake_sr()
        monkeypatch.setattr(
            "socket.getaddrinfo",
            lambda host, port: [(2, 1, 6, "", ("127.0.0.1", 0))],
        )
        pinger.ping("localhost", 1, 0.0, 1.0)
        assert fake.calls[0][0][0][IP].dst == "127.0.0.1"

    def test_unresolvable_host(self, pinger, monkeypatch):
        """Test resolution failures raise PingError."""
        import socket

        def fail(host, port):
            raise socket.gaierror("Name or service not known")

        monkeypatch.setattr("socket.getaddrinfo", fail)
        with pytest.raises(PingError, match="cannot resolve"):
            pinger.ping("no-such-host.invalid", 1, 0.0, 1.0)

    @pytest.mark.parametrize("error", [PermissionError("denied"), OSError("network is down")])
    def test_send_failure(self, pinger, fake_sr, error):
        """Test socket errors surface as PingError."""
        fake_sr(error=error)
        with pytest.raises(PingError):
            pinger.ping("192.0.2.1", 1, 0.0, 1.0)
