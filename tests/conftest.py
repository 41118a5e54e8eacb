"""Shared pytest configuration and fixtures for tests."""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from repost.core import repository  # noqa: E402


@pytest.fixture(autouse=True)
def temp_data_dir(monkeypatch, tmp_path):
    """Keep workspaces in a temporary directory and start in a fresh playground."""
    data_dir = tmp_path / "repost"
    monkeypatch.setattr(repository, "DATA_DIR", data_dir)
    repository.close_all()
    yield data_dir
    repository.close_all()


@pytest.fixture
def repl_ctx():
    """The REPL session context, cleared before and after the test."""
    from repost.repl.context import repl_context

    repl_context.reset()
    yield repl_context
    repl_context.reset()
