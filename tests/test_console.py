"""
Text Console Tests
------------------
Drive main.run_text_mode() with scripted input.
"""

import logging

import pytest

import main


@pytest.fixture
def script_input(monkeypatch):
    """Feed console.input() from a list; EOFError when exhausted."""
    def _script(lines):
        feed = iter(lines)

        def _input(prompt=""):
            try:
                return next(feed)
            except StopIteration:
                raise EOFError
        monkeypatch.setattr(main.console, "input", _input)
    return _script


def test_routes_messages_until_quit(orchestrator, dialogue, script_input):
    script_input(["/gallery", "status", "commands", "help", "hello there", "quit", "/stili"])

    main.run_text_mode(orchestrator)

    status = orchestrator.get_status()
    assert status["messages_processed"] == 2
    assert status["commands_detected"] == 1
    assert dialogue.calls == ["hello there"]


def test_detect_only_does_not_route(orchestrator, dialogue, script_input):
    script_input(["/gallery", "ciao"])

    main.run_text_mode(orchestrator, detect_only=True)

    assert orchestrator.get_status()["messages_processed"] == 0
    assert dialogue.calls == []


def test_main_missing_registry(tmp_path, monkeypatch):
    monkeypatch.setattr(main, "configure_logging", lambda **kwargs: None)
    config = tmp_path / "config.yaml"
    config.write_text("logging:\n  console: false\n  file: false\n", encoding="utf-8")

    code = main.main(["--config", str(config), "--registry", str(tmp_path / "none.yaml")])

    assert code == 1


def test_main_bad_config(tmp_path, caplog):
    config = tmp_path / "config.yaml"
    config.write_text("logging:\n  level: LOUD\n", encoding="utf-8")

    with caplog.at_level(logging.CRITICAL, logger="aida.errors"):
        code = main.main(["--config", str(config)])

    assert code == 2
    assert any(r.getMessage().startswith("CONFIG_ERROR") for r in caplog.records)
