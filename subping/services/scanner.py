"""Concurrent ICMP sweep of every address in a subnet."""

import asyncio
import logging
import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime
from enum import Enum

from ..models.config import ScanOptions
from ..models.scan_result import PingResult, ScanReport
from .pinger import Pinger, PingError
from .subnet import SubnetHostsIterator

logger = logging.getLogger(__name__)

# Queue item telling a worker there are no more jobs
_STOP = None


class ScanState(str, Enum):
    """Lifecycle of a scan session."""

    CREATED = "created"
    DISPATCHING = "dispatching"
    DRAINING = "draining"
    COMPLETED = "completed"


def calculate_max_partition_size(data_size: int, num_partitions: int) -> int:
    """Ceiling of data_size / num_partitions."""
    if num_partitions < 1:
        raise ValueError("number of partitions should be more than zero (0)")

    max_partition_size, remainder = divmod(data_size, num_partitions)
    if remainder:
        max_partition_size += 1

    if max_partition_size < 0:
        raise ValueError("the partition size exceeds the supported range")

    return max_partition_size


class SubnetScanner:
    """Pings every address of a subnet with a fixed pool of workers.

    Addresses are fed in ascending order through a bounded queue sized by
    the partition size, so the producer blocks while workers are busy. A
    scanner runs once; build a new one to scan again.
    """

    def __init__(self, options: ScanOptions, pinger: Pinger):
        self.options = options
        self.pinger = pinger
        self.targets = SubnetHostsIterator.from_cidr(options.subnet)
        self.batch_size = calculate_max_partition_size(
            self.targets.total_hosts, options.max_workers
        )
        self.state = ScanState.CREATED
        self.results: dict[str, PingResult] = {}
        self.total_results = 0
        self.scan_time: datetime | None = None
        self.duration_seconds = 0.0

        self._store: dict[str, PingResult] = {}
        self._store_lock = threading.Lock()

    @property
    def count(self) -> int:
        return self.options.count

    @property
    def interval(self) -> float:
        return self.options.interval

    @property
    def timeout(self) -> float:
        return self.options.timeout

    @property
    def max_workers(self) -> int:
        return self.options.max_workers

    @property
    def total_hosts(self) -> int:
        return self.targets.total_hosts

    def run(self) -> None:
        """Ping every address in the subnet and collect the results."""
        if self.state != ScanState.CREATED:
            raise RuntimeError(f"scan session already {self.state.value}; create a new one")

        self.scan_time = datetime.now()
        start = time.monotonic()
        jobs: queue.Queue[str | None] = queue.Queue(maxsize=self.batch_size)

        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="subping-worker"
        ) as executor:
            workers = [
                executor.submit(self._worker, worker_id, jobs)
                for worker_id in range(self.max_workers)
            ]
            logger.debug(f"Spawned {self.max_workers} workers")

            self.state = ScanState.DISPATCHING
            logger.debug(f"Assigning {self.total_hosts} targets in {self.targets.network}")
            for ip in self.targets:
                target = str(ip)
                jobs.put(target)
                logger.debug(f"Assigned task: {target}")

            self.state = ScanState.DRAINING
            logger.debug("Waiting for all workers to finish their jobs")
            for _ in workers:
                jobs.put(_STOP)
            wait(workers)

        with self._store_lock:
            self.results = dict(self._store)
        self.total_results = len(self.results)
        self.duration_seconds = time.monotonic() - start
        self.state = ScanState.COMPLETED
        logger.info(
            f"Scanned {self.total_results} hosts in {self.targets.network}, "
            f"{self.online_count} online ({self.duration_seconds:.1f}s)"
        )

    async def run_async(self) -> None:
        """Run the scan in a thread pool to avoid blocking the event loop."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.run)

    def _worker(self, worker_id: int, jobs: "queue.Queue[str | None]") -> None:
        """Ping queued targets until the stop marker arrives."""
        while True:
            target = jobs.get()
            if target is _STOP:
                break

            result = self._probe(worker_id, target)
            with self._store_lock:
                self._store[target] = result

            # Each worker paces itself on top of the pinger's own spacing
            time.sleep(self.interval)

    def _probe(self, worker_id: int, target: str) -> PingResult:
        try:
            return self.pinger.ping(target, self.count, self.interval, self.timeout)
        except PingError as e:
            logger.debug(f"[worker {worker_id}] Ping failed for {target}: {e}")
        except Exception as e:
            logger.error(f"[worker {worker_id}] Unexpected error pinging {target}: {e}")
        return PingResult()

    def get_results(self) -> dict[str, PingResult]:
        """Address to result mapping of the completed scan."""
        return self.results

    def get_online_hosts(self) -> dict[str, PingResult]:
        """Hosts that answered at least one echo request."""
        return {ip: r for ip, r in self.results.items() if r.packets_recv > 0}

    @property
    def online_count(self) -> int:
        return len(self.get_online_hosts())

    @property
    def offline_count(self) -> int:
        return self.total_results - self.online_count

    def report(self) -> ScanReport:
        """Summarise the scan for display."""
        return ScanReport(
            subnet=str(self.targets.network),
            first_ip=str(self.targets.first_address),
            last_ip=str(self.targets.last_address),
            total_hosts=self.total_hosts,
            results=dict(self.results),
            scan_time=self.scan_time or datetime.now(),
            duration_seconds=self.duration_seconds,
        )
