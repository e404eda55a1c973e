from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import pytest

from churnmap.join.resolver import ResolvedColumns

ENV_VARS = ("LOG_LEVEL", "CHURNMAP_CONFIG", "CHURNMAP_CLASH_SUFFIX", "CHURNMAP_REPORT_PATH")


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run every test from an empty directory with no churnmap env vars."""
    for name in ENV_VARS:
        # setenv first so teardown removes anything a .env file adds
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    yield
    logging.getLogger("churnmap").handlers.clear()


@pytest.fixture
def write_csv(tmp_path: Path) -> Callable[[str, str], Path]:
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def columns() -> ResolvedColumns:
    return ResolvedColumns(
        designite_commit="child_commit_id",
        designite_path="file_path",
        churn_commit="child_commit",
        churn_new_path="new_path",
        churn_old_path="old_path",
    )
