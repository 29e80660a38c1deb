"""Pytest configuration.

Parts of the package (desktop lookup, the batch worker bridge) use PySide6.
We create a single `QApplication` for the entire session as early as possible
and cleanly shut it down at the end. Qt runs offscreen unless the caller says
otherwise.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import numpy as np
import pytest
from PIL import Image

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a QApplication exists before collecting/running tests."""

    # Import lazily so non-Qt environments can still import this conftest.
    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    global _APP

    app = QApplication.instance()
    if app is None:
        # Keep a strong ref so it isn't GC'd mid-session.
        _APP = QApplication([])
    else:
        _APP = app


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    """Attempt a clean Qt shutdown to avoid lingering threads at interpreter exit."""

    try:
        from PySide6.QtWidgets import QApplication
    except ImportError:
        return

    app = QApplication.instance()
    if app is None:
        return

    app.quit()
    app.processEvents()


def transparent_rgba(w: int = 6, h: int = 4) -> np.ndarray:
    """Red image whose left column is fully transparent and second column half transparent."""
    arr = np.zeros((h, w, 4), dtype=np.uint8)
    arr[:, :, 0] = 255
    arr[:, :, 3] = 255
    arr[:, 0, 3] = 0
    arr[:, 1, 3] = 128
    return arr


def half_transparent_rgba(size: int = 16) -> np.ndarray:
    """Left half fully transparent, right half opaque red."""
    arr = np.zeros((size, size, 4), dtype=np.uint8)
    arr[:, :, 0] = 255
    arr[:, size // 2 :, 3] = 255
    return arr


@pytest.fixture
def write_image():
    """Save a numpy array with Pillow and return the path."""

    def _write(path: Path, arr: np.ndarray, fmt: str | None = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(arr).save(path, format=fmt)
        return path

    return _write
