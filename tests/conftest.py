"""Pytest configuration and shared fixtures."""

import json
import sys
from pathlib import Path
from typing import Callable, Optional

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from typearch_guard.core.base_enforcer import BaseEnforcer, ProjectContext  # noqa: E402


@pytest.fixture
def make_project(tmp_path) -> Callable[..., Path]:
    """Build a TypeScript project in a temp directory.

    Call with a ``{relative_path: content}`` mapping; a tsconfig.json is
    written unless ``tsconfig=None`` is passed.
    """
    root = tmp_path.resolve()

    def _make(files: dict[str, str], tsconfig: Optional[dict] = {}) -> Path:  # noqa: B006
        if tsconfig is not None:
            (root / "tsconfig.json").write_text(json.dumps(tsconfig), encoding="utf-8")
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def run_check(make_project):
    """Run a single check over a freshly built project and return its result."""

    def _run(check_name: str, files: dict[str, str], **context_args):
        root = make_project(files)
        context = ProjectContext.load(root, **context_args)
        assert context is not None
        return BaseEnforcer.create(check_name, context).run()

    return _run

