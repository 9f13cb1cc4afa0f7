"""
Orchestrator Tests
------------------
The command gate runs before the dialogue pipeline.

Test Cases:
1. Commands short-circuit the dialogue
2. Conversation reaches the dialogue unmodified
3. Dialogue failures become typed errors, never exceptions
4. Status counters and turn ids
"""

import logging

import pytest

from core import (
    MockDialogue, Orchestrator, OrchestratorConfig, ROUTE_COMMAND, ROUTE_CONVERSATION
)
from core.errors import ErrorCategory, ErrorHandler
from infra.config import ConfigError
from commands import RegistryError

from conftest import RecordingDialogue


class TestCommandRouting:

    @pytest.mark.parametrize("message", ["/gallery", "  /STILI ", "mostra  gallery", "Open Gallery"])
    def test_command_short_circuits_dialogue(self, orchestrator, dialogue, message):
        result = orchestrator.process_message(message)

        assert result.success
        assert result.route == ROUTE_COMMAND
        assert result.is_command
        assert result.action == "show_gallery"
        assert result.reply is None
        assert dialogue.calls == []

    def test_detection_attached(self, orchestrator):
        result = orchestrator.process_message("/styles")
        assert result.detection.original_message == "/styles"
        assert result.detection.normalized_command == "show_gallery"


class TestConversationRouting:

    def test_message_forwarded_unmodified(self, orchestrator, dialogue):
        message = "  Crea un'immagine di un TRAMONTO  "
        result = orchestrator.process_message(message, session_id="s-1")

        assert result.success
        assert result.route == ROUTE_CONVERSATION
        assert result.action is None
        assert result.reply == "Tell me more about your video."
        assert dialogue.calls == [message]

    def test_near_miss_goes_to_dialogue(self, orchestrator, dialogue):
        result = orchestrator.process_message("voglio vedere la gallery")
        assert result.route == ROUTE_CONVERSATION
        assert dialogue.calls == ["voglio vedere la gallery"]

    def test_empty_message_goes_to_dialogue(self, orchestrator, dialogue):
        result = orchestrator.process_message("")
        assert result.route == ROUTE_CONVERSATION
        assert dialogue.calls == [""]


class TestDialogueFailure:

    def test_failure_becomes_error_result(self, preprocessor):
        handler = ErrorHandler()
        failing = RecordingDialogue(fail_with=RuntimeError("LLM timeout"))
        orch = Orchestrator(preprocessor=preprocessor, dialogue=failing, error_handler=handler)

        result = orch.process_message("raccontami una storia")

        assert not result.success
        assert result.route == ROUTE_CONVERSATION
        assert result.error == "LLM timeout"
        assert result.reply == ErrorHandler.MESSAGES[ErrorCategory.DIALOGUE_FAILURE]
        assert handler.get_error_stats() == {"DIALOGUE_FAILURE": 1}

    def test_commands_unaffected_by_failing_dialogue(self, preprocessor):
        failing = RecordingDialogue(fail_with=RuntimeError("down"))
        orch = Orchestrator(preprocessor=preprocessor, dialogue=failing)

        result = orch.process_message("/gallery")

        assert result.success
        assert result.action == "show_gallery"
        assert failing.calls == []


class TestRoutingFailure:

    def test_unexpected_error_becomes_system_error(self, preprocessor, dialogue, monkeypatch):
        handler = ErrorHandler()
        orch = Orchestrator(preprocessor=preprocessor, dialogue=dialogue, error_handler=handler)

        def broken_resolve(detection):
            raise KeyError("show_gallery")
        monkeypatch.setattr(preprocessor, "resolve_action", broken_resolve)

        result = orch.process_message("/gallery")

        assert not result.success
        assert result.action is None
        assert not result.detection.is_command
        assert result.detection.original_message == "/gallery"
        assert result.reply == ErrorHandler.MESSAGES[ErrorCategory.SYSTEM_ERROR]
        assert handler.get_error_stats() == {"SYSTEM_ERROR": 1}
        assert orch.get_status()["messages_processed"] == 1


class TestTurns:

    def test_turn_ids_unique(self, orchestrator):
        first = orchestrator.process_message("/gallery")
        second = orchestrator.process_message("/gallery")

        assert first.turn_id.startswith("turn_")
        assert first.turn_id != second.turn_id

    def test_turn_end_logged(self, orchestrator, caplog):
        with caplog.at_level(logging.INFO, logger="aida"):
            result = orchestrator.process_message("show styles")

        turn_end = [r for r in caplog.records if r.name == "aida.core.turn"]
        assert len(turn_end) == 1
        assert turn_end[0].turn_id == result.turn_id
        assert turn_end[0].route == ROUTE_COMMAND

    def test_result_serialisation(self, orchestrator):
        data = orchestrator.process_message("/gallery").to_dict()
        assert data["route"] == "command"
        assert data["action"] == "show_gallery"
        assert data["detection"]["isCommand"] is True


class TestStatus:

    def test_counters(self, orchestrator):
        orchestrator.process_message("/gallery")
        orchestrator.process_message("hello")
        orchestrator.process_message("apri galleria")

        status = orchestrator.get_status()
        assert status["initialized"]
        assert status["messages_processed"] == 3
        assert status["commands_detected"] == 2
        assert status["intents_loaded"] == 1
        assert status["triggers_loaded"] == 9
        assert status["dialogue"] == "recording"

    def test_status_before_initialize(self):
        status = Orchestrator().get_status()
        assert status["initialized"] is False
        assert status["intents_loaded"] == 0


class TestInitialization:

    def test_defaults(self):
        orch = Orchestrator()
        orch.initialize()

        assert isinstance(orch._dialogue, MockDialogue)
        assert orch.process_message("/gallery").action == "show_gallery"

    def test_lazy_initialize(self):
        result = Orchestrator().process_message("show gallery")
        assert result.action == "show_gallery"

    def test_custom_registry_path(self, write_registry):
        path = write_registry("""
            intents:
              - type: GALLERY
                action: show_gallery
                commands: [/looks]
        """)
        orch = Orchestrator(OrchestratorConfig(registry_path=str(path)))

        assert orch.process_message("/looks").is_command
        assert not orch.process_message("/gallery").is_command

    def test_missing_registry(self, tmp_path):
        handler = ErrorHandler()
        orch = Orchestrator(
            OrchestratorConfig(registry_path=str(tmp_path / "nope.yaml")),
            error_handler=handler,
        )

        with pytest.raises(FileNotFoundError):
            orch.initialize()
        assert handler.get_error_stats() == {"REGISTRY_ERROR": 1}

    def test_invalid_registry(self, write_registry):
        path = write_registry("intents:\n  - type: UNKNOWN\n    action: x\n")
        orch = Orchestrator(OrchestratorConfig(registry_path=str(path)))

        with pytest.raises(RegistryError):
            orch.initialize()

    def test_unknown_dialogue(self):
        handler = ErrorHandler()
        orch = Orchestrator(OrchestratorConfig(dialogue="gpt-9"), error_handler=handler)

        with pytest.raises(ConfigError):
            orch.initialize()
        assert handler.get_error_stats() == {"CONFIG_ERROR": 1}
        assert handler.get_history()[0].details == {"source": "dialogue.handler"}


class TestMockDialogue:

    def test_mentions_gallery_commands(self):
        reply = MockDialogue().respond("ciao")
        assert "ciao" in reply
        assert "/gallery" in reply

    def test_blank_message(self):
        assert MockDialogue().respond("   ")
