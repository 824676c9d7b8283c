"""
Unit Tests: CLI

Argument parsing and help output of the tubebrief command.
"""

import sys

import pytest

from tubebrief.__main__ import main


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["tubebrief", *argv])
    return main()


def test_backfill_help_describes_missing_search_text(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc_info:
        _run(monkeypatch, "--help")
    assert exc_info.value.code == 0

    out = capsys.readouterr().out
    assert "Fill search text for briefs missing it" in out
    assert "Recompute" not in out


def test_no_command_prints_help(monkeypatch, capsys):
    assert _run(monkeypatch) == 1
    assert "Available commands" in capsys.readouterr().out
