"""Pytest configuration and fixtures."""

import io
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Generator

import pytest

from logcourier.config import CourierConfig

# Keep tests away from the real cache directory
for _key in [k for k in os.environ if k.startswith("LC_")]:
    del os.environ[_key]


FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config(temp_dir: Path) -> CourierConfig:
    """Configuration rooted in the temporary directory."""
    return CourierConfig(app_id="testapp", app_name="Test App", cache_dir=temp_dir / "cache")


@pytest.fixture
def fixed_clock():
    """Clock that always reports FIXED_TIME."""
    return lambda: FIXED_TIME


class FailingStream:
    """Binary stream that yields some bytes, then raises on the next read."""

    def __init__(self, data: bytes, error: Exception | None = None):
        self._data = data
        self._error = error or OSError("simulated read failure")
        self._served = False

    def read(self, size: int = -1) -> bytes:
        if not self._served:
            self._served = True
            return self._data
        raise self._error

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False


class NonSeekableStream:
    """Read-only stream without seek support, like a pipe."""

    def __init__(self, data: bytes):
        self._buffer = io.BytesIO(data)

    def read(self, size: int = -1) -> bytes:
        return self._buffer.read(size)


@pytest.fixture
def failing_stream():
    return FailingStream


@pytest.fixture
def non_seekable_stream():
    return NonSeekableStream
