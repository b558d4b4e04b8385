"""Pytest fixtures for mongotab tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest

_TEST_CONFIG_DIR = Path(tempfile.mkdtemp(prefix="mongotab-test-config-"))
os.environ.setdefault("MONGOTAB_CONFIG_DIR", str(_TEST_CONFIG_DIR))


@pytest.fixture(autouse=True)
def _reset_keymap():
    """Tests that install a custom keymap must not leak it."""
    from mongotab.core.keymap import reset_keymap

    reset_keymap()
    yield
    reset_keymap()


@pytest.fixture
def local_conn():
    from mongotab.domains.connections.domain.connection import Connection

    return Connection(name="local", url="mongodb://localhost:27017", id="conn-local")


@pytest.fixture
def services(local_conn):
    from tests.helpers import make_services

    return make_services(connections=[local_conn])


@pytest.fixture
def app(services):
    from mongotab.domains.shell.app.app import App

    return App(services)
