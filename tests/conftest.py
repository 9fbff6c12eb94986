"""Shared pytest fixtures and test-run configuration."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from convention_linter.prompts import (
    PROMPTS_DIR,
    SYSTEM_TEMPLATE_NAME,
    USER_TEMPLATE_NAME,
)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom pytest options for integration test execution."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run tests marked as integration (external dependencies).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly enabled."""
    run_integration = config.getoption("--run-integration")
    env_enabled = os.getenv("RUN_INTEGRATION_TESTS") == "1"
    if run_integration or env_enabled:
        return

    skip_marker = pytest.mark.skip(
        reason=(
            "Integration tests are disabled by default. "
            "Use --run-integration or set RUN_INTEGRATION_TESTS=1."
        )
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_marker)


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Undo any logging configuration a test (or CLI invocation) applied."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def prompts_repo(tmp_path: Path) -> Path:
    """Repository root with the modern system/user prompt templates."""
    prompts_dir = tmp_path / PROMPTS_DIR
    prompts_dir.mkdir(parents=True)
    (prompts_dir / SYSTEM_TEMPLATE_NAME).write_text("You review naming.", encoding="utf-8")
    (prompts_dir / USER_TEMPLATE_NAME).write_text(
        "Check these changes:\n\n__DIFF_DATA__\n", encoding="utf-8"
    )
    return tmp_path
