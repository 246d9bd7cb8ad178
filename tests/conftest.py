"""
Pytest configuration for the `ring-client` test suite.

Tests import `ring_client...` normally. To make that work in a fresh checkout
without an editable install, the local `src` directory is added to `sys.path`.
"""

from __future__ import annotations

import sys
from pathlib import Path


def pytest_configure() -> None:
    """
    Ensure the local `ring_client` package is importable for tests.
    """

    project_root = Path(__file__).resolve().parent.parent
    src = project_root / "src"

    if src.is_dir():
        # Prepend so local sources win over any globally installed package.
        sys.path.insert(0, str(src))
