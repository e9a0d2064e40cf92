"""Tests for the raindrops command line."""
import argparse
import locale

import pytest

from raindrops.cli import main as cli


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda config=None: None)


def _args(**overrides):
    defaults = dict(pin=None, root=None, debug=False, host=None, port=None, no_read=False, no_write=False)
    defaults.update(overrides)
    return argparse.Namespace(**defaults)


def test_build_config_applies_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("RAINDROPS_ROOT", str(tmp_path / "env-root"))

    config = cli.build_config(_args(
        pin="2468",
        root=str(tmp_path / "cli-root"),
        port=9001,
        host="127.0.0.1",
        no_write=True,
        debug=True,
    ))

    assert config.security.pin == "2468"
    assert config.storage.root == tmp_path / "cli-root"
    assert config.port == 9001
    assert config.host == "127.0.0.1"
    assert config.allow_read is True
    assert config.allow_write is False
    assert config.debug is True
    assert config.log.level == "DEBUG"


def test_build_config_keeps_env_without_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("RAINDROPS_ROOT", str(tmp_path / "env-root"))
    monkeypatch.setenv("RAINDROPS_PORT", "7000")

    config = cli.build_config(_args())

    assert config.storage.root == tmp_path / "env-root"
    assert config.port == 7000


def test_clear_command(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("RAINDROPS_ROOT", str(tmp_path / "env-root"))
    root = tmp_path / "drop"
    root.mkdir()
    (root / "one.txt").write_text("1")
    (root / "two").mkdir()

    cli.main(["clear", "--root", str(root)])

    assert list(root.iterdir()) == []
    assert capsys.readouterr().out.strip() == f"Removed 2 item(s) from {root.resolve()}"


def test_serve_command_builds_state(monkeypatch, tmp_path):
    import raindrops.server.api as api

    monkeypatch.setenv("RAINDROPS_ROOT", str(tmp_path / "env-root"))

    served, collation = [], []
    monkeypatch.setattr(api, "serve", lambda state: served.append(state))
    monkeypatch.setattr(cli, "use_system_collation", lambda: collation.append(True))

    cli.main(["serve", "--root", str(tmp_path / "drop"), "--pin", "9753", "--port", "9100", "--no-read", "--no-console"])

    assert collation == [True]
    assert len(served) == 1
    state = served[0]
    assert state.control.pin == "9753"
    assert not state.control.read_allowed
    assert state.control.write_allowed
    assert state.config.port == 9100
    assert state.root == (tmp_path / "drop").resolve()


def test_collation_comes_from_environment(monkeypatch):
    calls = []
    monkeypatch.setattr(locale, "setlocale", lambda category, value: calls.append((category, value)))

    cli.use_system_collation()

    assert calls == [(locale.LC_COLLATE, "")]


def test_unknown_locale_is_not_fatal(monkeypatch, caplog):
    def unavailable(category, value):
        raise locale.Error("unsupported locale setting")

    monkeypatch.setattr(locale, "setlocale", unavailable)

    cli.use_system_collation()

    assert "unsupported locale setting" in caplog.text


def test_no_command_prints_help(capsys):
    cli.main([])
    assert "serve" in capsys.readouterr().out
