"""Shared fixtures for the perl-depends tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from perl_depends.models import DependsConfig


@pytest.fixture
def config() -> DependsConfig:
    return DependsConfig()


@pytest.fixture
def write_script(tmp_path: Path):
    def _write(content: str, name: str = "script.pl") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
