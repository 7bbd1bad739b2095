#!/usr/bin/env python3
"""
Shared fixtures for signing resolver tests.
"""

from pathlib import Path
from typing import Callable, List

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def reset_logger():
    """Drop handlers added during a test, the CLI binds them to captured streams."""
    yield
    logger.remove()


@pytest.fixture
def log_messages() -> List[str]:
    """Collect loguru messages emitted during a test."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A Flutter project layout with an ``android`` directory."""
    (tmp_path / "android").mkdir()
    return tmp_path


@pytest.fixture
def write_file() -> Callable[[Path, str], Path]:
    def _write(path: Path, content: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="latin-1")
        return path

    return _write


@pytest.fixture
def keystore(project_dir: Path) -> Path:
    """An upload keystore outside the android directory, like ../keys/app.keystore."""
    path = project_dir / "keys" / "app.keystore"
    path.parent.mkdir()
    path.write_bytes(b"\xfe\xed\xfe\xed")
    return path
