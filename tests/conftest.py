# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Shared pytest fixtures for provisioner tests."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from provisioner.config import ProvisionerConfig
from provisioner.dotenv_loader import reset_dotenv_state
from provisioner.logging import SecretFilter
from tests.fakes import FakeExecutor


def make_raw_config() -> dict:
    """Return a complete settings mapping."""
    return {
        "docker": {
            "binary": "docker",
            "image": "base",
            "cmd": {
                "bin": "/var/lib/app/start",
                "args": ["--port", "8888"],
            },
            "repository-namespace": "tsuru",
            "timeout": 60,
        }
    }


@pytest.fixture
def config() -> ProvisionerConfig:
    """Settings with every key the provisioner reads."""
    return ProvisionerConfig(make_raw_config())


@pytest.fixture
def executor() -> FakeExecutor:
    """Executor spy with no queued responses."""
    return FakeExecutor()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a complete YAML config file and return its path."""
    path = tmp_path / "provisioner.yaml"
    path.write_text(
        "docker:\n"
        "  binary: docker\n"
        "  image: base\n"
        "  cmd:\n"
        "    bin: /var/lib/app/start\n"
        "    args: [--port, '8888']\n"
        "  repository-namespace: tsuru\n"
        "  timeout: 60\n"
    )
    return path


@pytest.fixture(autouse=True)
def _isolate_global_state() -> Iterator[None]:
    """Reset module-level state touched by config loading."""
    reset_dotenv_state()
    SecretFilter.clear_secrets()
    yield
    reset_dotenv_state()
    SecretFilter.clear_secrets()
