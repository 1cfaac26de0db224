"""Tests for configuration validation and tagged console logging."""

import pytest

from geocoin.config import Config
from geocoin.logging_utils import (
    Color,
    colored,
    log_deterministic,
    log_error,
    log_player,
)


def test_default_config_is_valid():
    Config.validate()
    summary = Config.display()
    assert "Geocoin Configuration" in summary
    assert "Spawn Probability" in summary


@pytest.mark.parametrize(
    "name, value",
    [
        ("SPAWN_PROBABILITY", 1.5),
        ("TILE_DEGREES", 0.0),
        ("NEIGHBORHOOD_SIZE", -1),
        ("MAX_COINS", 0),
        ("MAP_UPDATE_DISTANCE", 0),
        ("STORAGE_RETRIES", 0),
    ],
)
def test_config_rejects_impossible_values(monkeypatch, name, value):
    monkeypatch.setattr(Config, name, value)
    with pytest.raises(ValueError):
        Config.validate()


def test_colored_respects_no_color(monkeypatch):
    assert colored("hi", Color.RED) == "hi"

    monkeypatch.delenv("GEOCOIN_NO_COLOR")
    assert colored("hi", Color.RED) == f"{Color.RED.value}hi{Color.RESET.value}"


def test_verbose_gates_chatter(monkeypatch, capsys):
    log_deterministic("materialized")
    log_player("moved")
    assert capsys.readouterr().out == ""

    monkeypatch.setenv("GEOCOIN_VERBOSE", "true")
    log_deterministic("materialized")
    log_player("moved")
    out = capsys.readouterr().out
    assert "[•] materialized" in out
    assert "[>] moved" in out


def test_errors_always_print(capsys):
    log_error("storage down")
    assert capsys.readouterr().out.strip() == "[!] storage down"
