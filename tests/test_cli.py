"""
Smoke tests for the command line entry point.
"""

import json
import sys

import pytest

from cli import main
from packages.minez.game import run_headless


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["minez", *argv])
    return main()


class TestAutoplayCommand:

    def test_json_output(self, monkeypatch, capsys):
        assert run_cli(monkeypatch, "autoplay", "--seed", "12345", "--levels", "1", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert data["seed"] == 12345
        assert data["stats"]["levels_played"] == 1

    def test_matches_headless_run(self, monkeypatch, capsys):
        run_cli(monkeypatch, "autoplay", "--seed", "2024", "--levels", "2", "--json")
        data = json.loads(capsys.readouterr().out)
        result = run_headless(2024, levels=2)
        assert (data["victory"], data["lives"], data["gold"]) == \
               (result.victory, result.lives, result.gold)

    def test_text_output(self, monkeypatch, capsys):
        assert run_cli(monkeypatch, "autoplay", "--seed", "12345", "--levels", "1") == 0
        out = capsys.readouterr().out
        assert "Run Started (seed 12345)" in out
        assert "=== Run Statistics ===" in out


class TestBoardCommand:

    def test_json_board(self, monkeypatch, capsys):
        assert run_cli(monkeypatch, "board", "--seed", "7", "--level", "2", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert (data["width"], data["height"]) == (6, 6)
        assert len(data["rows"]) == 6

    def test_unknown_challenge_raises(self, monkeypatch):
        with pytest.raises(ValueError):
            run_cli(monkeypatch, "board", "--seed", "7", "--challenge", "NotAChallenge")


class TestRngCommand:

    def test_json_streams(self, monkeypatch, capsys):
        assert run_cli(monkeypatch, "rng", "--seed", "42", "--count", "3", "--json") == 0
        data = json.loads(capsys.readouterr().out)
        assert set(data) == {"level", "mathematician", "shop", "challenge"}
        assert all(len(values) == 3 for values in data.values())


def test_no_command_prints_help(monkeypatch, capsys):
    assert run_cli(monkeypatch) == 1
    assert "usage" in capsys.readouterr().out.lower()
