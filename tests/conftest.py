import logging
import os
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _configure_logging_for_tests() -> None:
    """Route package logs through tagged handlers at INFO for every test."""
    from habitat_client.core.common.logging_utils import (
        configure_logging_with_environment_tagging,
    )

    configure_logging_with_environment_tagging(level=logging.INFO)


@pytest.fixture(autouse=True)
def _isolate_client_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer HAB_CLIENT_* settings out of the tests."""
    for name in list(os.environ):
        if name.startswith("HAB_CLIENT_"):
            monkeypatch.delenv(name)


@pytest.fixture
def make_binary(tmp_path: Path) -> Callable[..., str]:
    """Write an executable shell script that stands in for the hab binary."""

    def _make(body: str, name: str = "hab") -> str:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + textwrap.dedent(body).lstrip("\n"))
        path.chmod(0o755)
        return str(path)

    return _make
