"""Tests for the command-line entry point."""

from __future__ import annotations

import pytest

from mongotab.cli import build_parser, main, runtime_from_args
from mongotab.domains.connections.store.connections import ConnectionStore
from mongotab.shared.core.store import FileStorage


@pytest.fixture
def config_dir(tmp_path):
    return tmp_path / "config"


def _run(config_dir, *argv: str) -> int:
    return main(["--config-dir", str(config_dir), *argv])


class TestConnectionCommands:
    def test_list_empty(self, config_dir, capsys):
        assert _run(config_dir, "connection", "list") == 0

        assert "No saved connections." in capsys.readouterr().out

    def test_add_then_list_masks_password(self, config_dir, capsys):
        assert _run(config_dir, "connection", "add", "prod", "mongodb://admin:hunter2@db:27017") == 0
        assert _run(config_dir, "connection", "list") == 0

        out = capsys.readouterr().out
        assert "prod" in out
        assert "hunter2" not in out
        assert "admin:***@db" in out

        saved = ConnectionStore(FileStorage(config_dir)).load_all()
        assert [conn.url for conn in saved] == ["mongodb://admin:hunter2@db:27017"]

    def test_add_duplicate_name_fails(self, config_dir, capsys):
        _run(config_dir, "connection", "add", "prod", "mongodb://db")

        assert _run(config_dir, "connection", "add", "prod", "mongodb://other") == 1
        assert "already exists" in capsys.readouterr().out

    def test_delete(self, config_dir, capsys):
        _run(config_dir, "connection", "add", "prod", "mongodb://db")

        assert _run(config_dir, "connection", "delete", "prod") == 0
        assert ConnectionStore(FileStorage(config_dir)).load_all() == []

    def test_delete_unknown(self, config_dir, capsys):
        assert _run(config_dir, "connection", "delete", "nope") == 1
        assert "not found" in capsys.readouterr().out


class TestParser:
    def test_collection_requires_database(self, capsys):
        with pytest.raises(SystemExit):
            main(["--collection", "orders"])

    def test_url_and_connection_are_exclusive(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--url", "mongodb://x", "--connection", "local"])

    def test_flags_override_runtime(self, tmp_path):
        args = build_parser().parse_args(["--page-size", "7", "--mock", "--debug", "--config-dir", str(tmp_path)])

        runtime = runtime_from_args(args)

        assert runtime.page_size == 7
        assert runtime.mock is True
        assert runtime.debug_mode is True
        assert runtime.config_dir == tmp_path
