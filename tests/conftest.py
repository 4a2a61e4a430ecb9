from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import pytest
from loguru import logger

from config import SimConfig


@pytest.fixture(autouse=True)
def silence_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run long convergence checks (skipped by default).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--run-slow"):
        return

    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def base_config() -> SimConfig:
    # small N so a full run stays fast
    return SimConfig(N=20_000, seed=12345, batch_size=500, emit_every_ms=80, yield_every_ms=12)
