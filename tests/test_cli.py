"""
Tests for the command line front-end.
"""
import asyncio
import json
import logging

import httpx
import pytest

from wb_provider import cli
from wb_provider.utils.config import AppConfig, save_config


@pytest.fixture
def patched_cli(monkeypatch, tmp_path, client_factory):
    """Point the CLI at a temp config and a simulated server."""
    monkeypatch.setattr("wb_provider.utils.config.CONFIG_PATH", tmp_path / "config.json")

    def install(handler):
        monkeypatch.setattr(cli, "RemoteClient", lambda **kwargs: client_factory(handler))

    return install


def run_cli(argv):
    args = cli.build_parser().parse_args(argv)
    return asyncio.run(cli.run(args))


class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_metadata_args(self):
        args = cli.build_parser().parse_args(["--server-port", "9000", "metadata", "/m/x.mp4", "--year", "2001"])
        assert args.command == "metadata"
        assert args.server_port == 9000
        assert args.year == 2001


class TestCommands:
    def test_metadata(self, patched_cli, metadata_server, requests_seen, capsys):
        patched_cli(metadata_server)
        assert run_cli(["--server-ip", "10.9.9.9", "metadata", "/m/ABC-1.mp4"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert out["has_metadata"] is True
        assert out["metadata"]["title"] == "Foo"
        assert str(requests_seen[0].url) == "http://10.9.9.9:8765/metadata"

    def test_search(self, patched_cli, metadata_server, capsys):
        patched_cli(metadata_server)
        assert run_cli(["search", "Foo"]) == 0
        out = json.loads(capsys.readouterr().out)
        assert [r["name"] for r in out] == ["Foo", "Bar"]

    def test_image_saved(self, patched_cli, tmp_path):
        patched_cli(lambda request: httpx.Response(200, content=b"img", headers={"Content-Type": "image/jpeg"}))
        dest = tmp_path / "poster.jpg"
        assert run_cli(["image", "http://img.example.com/p.jpg", "-o", str(dest)]) == 0
        assert dest.read_bytes() == b"img"

    def test_image_not_found(self, patched_cli, tmp_path):
        patched_cli(lambda request: httpx.Response(404))
        dest = tmp_path / "poster.jpg"
        assert run_cli(["image", "http://img.example.com/p.jpg", "-o", str(dest)]) == 1
        assert not dest.exists()


class TestLogLevel:
    def test_config_level_applied(self, patched_cli, metadata_server, restore_log_level):
        save_config(AppConfig(log_level="DEBUG"))
        patched_cli(metadata_server)
        assert run_cli(["search", "Foo"]) == 0
        assert restore_log_level.level == logging.DEBUG
        assert all(h.level == logging.DEBUG for h in restore_log_level.handlers)

    def test_env_beats_config(self, patched_cli, metadata_server, restore_log_level, monkeypatch):
        save_config(AppConfig(log_level="DEBUG"))
        monkeypatch.setenv("WB_PROVIDER_LOG_LEVEL", "ERROR")
        patched_cli(metadata_server)
        run_cli(["search", "Foo"])
        assert restore_log_level.level == logging.ERROR

    def test_verbose_beats_config(self, patched_cli, metadata_server, restore_log_level):
        save_config(AppConfig(log_level="WARNING"))
        patched_cli(metadata_server)
        run_cli(["-v", "search", "Foo"])
        assert restore_log_level.level == logging.DEBUG
