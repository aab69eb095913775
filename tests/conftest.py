"""Shared fixtures for envvars-scan tests."""

from pathlib import Path
from typing import Any

import pytest


@pytest.fixture
def make_tree(tmp_path: Path):
    """Create files under tmp_path from a {relative path: content} mapping."""

    def _make(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            target = tmp_path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return tmp_path

    return _make


class FakeFindingSource:
    """Returns canned semgrep output and records what it was asked to run."""

    def __init__(self, output: dict[str, Any]):
        self.output = output
        self.calls: list[tuple[Path, Path, list[str]]] = []
        self.rules_text = ""

    def run(self, rules_path: Path, target: Path, excludes: list[str]) -> dict[str, Any]:
        self.calls.append((rules_path, target, excludes))
        self.rules_text = Path(rules_path).read_text(encoding="utf-8")
        return self.output


@pytest.fixture
def fake_semgrep():
    def _make(results=None, errors=None) -> FakeFindingSource:
        return FakeFindingSource({"results": results or [], "errors": errors or []})

    return _make
