"""Tests for the process entry point."""

import pytest

import catch_cli.__main__ as main_module


def test_unexpected_error_is_reported(monkeypatch, capsys):
    def broken_app():
        raise RuntimeError("boom")

    monkeypatch.setattr(main_module, "app", broken_app)

    with pytest.raises(SystemExit) as exc_info:
        main_module.main()
    assert exc_info.value.code == 1
    output = capsys.readouterr().out
    assert "RuntimeError" in output
    assert "boom" in output


def test_normal_exit_passes_through(monkeypatch):
    def finished_app():
        raise SystemExit(0)

    monkeypatch.setattr(main_module, "app", finished_app)

    with pytest.raises(SystemExit) as exc_info:
        main_module.main()
    assert exc_info.value.code == 0
