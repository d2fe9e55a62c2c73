"""Tests for the command line entry point."""

import pytest
from rich.console import Console

import cli
from core.config import Config, ForwardSettings
from core.exceptions import ConfigurationError


@pytest.fixture
def recorded_console(monkeypatch):
    console = Console(width=120, record=True)
    monkeypatch.setattr(cli, "console", console)
    return console


def test_check_masks_secrets(recorded_console):
    config = Config(
        forward=ForwardSettings(
            headers={"X-Api-Key": "sk-live-0123456789abcdef", "X-Client": ""}
        )
    )

    cli.print_forward_status(config)

    text = recorded_console.export_text()
    assert "Location" in text
    assert "sk-liv...cdef" in text
    assert "0123456789" not in text
    assert "(removed)" in text


def test_check_without_headers(recorded_console):
    cli.print_forward_status(Config())

    assert "No override headers configured" in recorded_console.export_text()


def test_validate_config_rejects_empty_trigger():
    config = Config(forward=ForwardSettings(trigger_header="  "))

    with pytest.raises(ConfigurationError):
        cli.validate_config(config)


def test_validate_config_accepts_defaults():
    cli.validate_config(Config())


def test_main_config_flag(monkeypatch, recorded_console):
    monkeypatch.setattr(cli, "load_config", lambda: Config())
    monkeypatch.setattr("sys.argv", ["proxy-forward", "--config"])

    cli.main()

    assert "config.json" in recorded_console.export_text()


def test_main_exits_on_invalid_config(monkeypatch, recorded_console):
    monkeypatch.setattr(
        cli, "load_config", lambda: Config(forward=ForwardSettings(trigger_header=""))
    )
    monkeypatch.setattr("sys.argv", ["proxy-forward"])

    with pytest.raises(SystemExit) as exc_info:
        cli.main()

    assert exc_info.value.code == 1
    assert "Trigger header name is empty" in recorded_console.export_text()
