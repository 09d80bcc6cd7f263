"""
Shared pytest fixtures for param_router tests.

Provides:
- Clean diagnostics environment for every test
- build_app: factory for Flask test apps with a router registered
"""

import pytest
from flask import Flask


DIAGNOSTICS_VARS = ("ENV", "FLASK_ENV", "APP_ENV", "PARAM_ROUTER_DIAGNOSTICS")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test outside development mode."""
    for var in DIAGNOSTICS_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def development_mode(monkeypatch):
    """Turn on diagnostic 422 bodies."""
    monkeypatch.setenv("FLASK_ENV", "development")


@pytest.fixture
def build_app():
    """Return a helper that creates a test Flask app with a router registered."""
    def _build(router=None, **options):
        app = Flask(__name__)
        app.config['TESTING'] = True
        if router is not None:
            router.init_app(app, **options)
        return app
    return _build
