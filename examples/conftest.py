"""Shared pytest configuration for perch examples.

Provides the ``example_app`` fixture that loads a fresh App instance
from the ``app.py`` file in the same directory as the test. Each call
re-executes app.py in an isolated module namespace, so every test starts
with clean state (fresh user store, fresh route table).
"""

import importlib.util
from pathlib import Path

import pytest


@pytest.fixture
def example_app(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch):
    """Load a fresh App from the sibling app.py next to the test file."""
    app_dir = Path(request.path).parent
    # app.py imports its sibling route modules by name
    monkeypatch.syspath_prepend(str(app_dir))
    app_path = app_dir / "app.py"
    spec = importlib.util.spec_from_file_location(f"example_{app_dir.name}", app_path)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module.app
