"""Pytest configuration and fixtures."""

import json
import tempfile
from pathlib import Path

import pytest

from subping.models.config import MockPingerConfig
from subping.services.mock_pinger import MockPinger


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_pinger():
    """Mock pinger without the simulated per-probe delay."""
    return MockPinger(MockPingerConfig(simulate_timing=False))


@pytest.fixture
def clean_env(monkeypatch):
    """Remove CI markers so pinger auto-selection is predictable."""
    from subping.services.pinger import CI_ENV_VARS

    for var in CI_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "settings": {
            "log_level": "INFO",
            "pinger": "mock",
            "count": 2,
            "interval": 0.0,
            "timeout": 0.5,
            "max_workers": 4,
        },
        "mock": {
            "default_latency": 0.02,
            "default_packet_loss": 0.5,
            "simulate_timing": False,
            "host_configs": {
                "192.168.1.1": {"latency": 0.005, "packet_loss": 0.0},
                "192.168.1.2": {"should_error": True, "error_msg": "host unreachable"},
            },
        },
    }


@pytest.fixture
def sample_config_file(temp_dir, sample_config_data):
    """Create a sample config file for testing."""
    config_path = temp_dir / "subping.json"
    with open(config_path, "w") as f:
        json.dump(sample_config_data, f)
    return config_path
