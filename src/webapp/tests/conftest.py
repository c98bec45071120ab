# ABOUTME: pytest configuration for webapp tests
# ABOUTME: Configures timeouts, log capture and config file fixtures

import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List

import pytest
import tomli_w
import yaml
from loguru import logger


def pytest_configure(config):
    """Configure pytest for webapp tests."""
    config.addinivalue_line("markers", "unit: Unit tests with 20-second timeout")
    config.addinivalue_line("markers", "integration: Integration tests with 60-second timeout")
    config.addinivalue_line("markers", "config: Configuration loading and projection tests")


def pytest_collection_modifyitems(config, items):
    """Modify test items to add appropriate timeouts based on test type."""
    for item in items:
        # Respect an explicit timeout marker
        if item.get_closest_marker("timeout"):
            continue

        if item.get_closest_marker("unit"):
            item.add_marker(pytest.mark.timeout(20))
        elif item.get_closest_marker("integration"):
            item.add_marker(pytest.mark.timeout(60))


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """An empty directory to hold config files."""
    directory = tmp_path / "conf"
    directory.mkdir()
    return directory


@pytest.fixture
def write_config(config_dir: Path) -> Callable[..., Path]:
    """Write a config file in the given format into `config_dir`."""

    def _write(name: str, data: Dict[str, Any], file_format: str = "toml") -> Path:
        if file_format == "toml":
            path = config_dir / f"{name}.toml"
            path.write_text(tomli_w.dumps(data))
        elif file_format == "json":
            path = config_dir / f"{name}.json"
            path.write_text(json.dumps(data))
        else:
            path = config_dir / f"{name}.{file_format}"
            path.write_text(yaml.safe_dump(data))
        return path

    return _write


@pytest.fixture
def log_messages() -> Iterator[List[str]]:
    """Collect loguru messages emitted during the test."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
