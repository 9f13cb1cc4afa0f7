"""
Orchestrator
------------
Entry point for every inbound chat message.

Rule: the command gate runs first. An explicit command short-circuits the
dialogue pipeline and goes straight to its action; everything else reaches
the dialogue handler unmodified.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
import logging
import threading

from commands import CommandPreprocessor, CommandRegistry, DetectionResult, RegistryError
from commands.normalizer import coerce_text
from infra.config import ConfigError
from infra.logging import TurnContext, log_turn_end

from .dialogue import DialogueHandler, create_dialogue
from .errors import (
    ErrorHandler, create_config_error, create_dialogue_error,
    create_registry_error, create_system_error,
)

ROUTE_COMMAND = "command"
ROUTE_CONVERSATION = "conversation"


@dataclass
class OrchestratorConfig:
    """Configuration for the orchestrator."""
    registry_path: Optional[str] = None  # None = packaged trigger map
    dialogue: str = "mock"


@dataclass
class MessageResult:
    """Result of routing one message."""
    success: bool
    route: str
    detection: DetectionResult
    turn_id: str
    action: Optional[str] = None
    reply: Optional[str] = None
    error: Optional[str] = None
    execution_time_ms: float = 0.0

    @property
    def is_command(self) -> bool:
        return self.route == ROUTE_COMMAND

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "route": self.route,
            "action": self.action,
            "reply": self.reply,
            "error": self.error,
            "turnId": self.turn_id,
            "executionTimeMs": self.execution_time_ms,
            "detection": self.detection.to_dict(),
        }

    def __repr__(self) -> str:
        status = "✓" if self.success else "✗"
        target = self.action if self.is_command else "dialogue"
        return f"MessageResult({status} {self.route} -> {target})"


class Orchestrator:
    """
    Routes messages between the command gate and the dialogue pipeline.

    Collaborators can be injected (tests, alternate registries); otherwise
    they are built from the config in initialize().
    """

    def __init__(
        self,
        config: Optional[OrchestratorConfig] = None,
        preprocessor: Optional[CommandPreprocessor] = None,
        dialogue: Optional[DialogueHandler] = None,
        error_handler: Optional[ErrorHandler] = None,
    ):
        self.config = config or OrchestratorConfig()
        self._preprocessor = preprocessor
        self._dialogue = dialogue
        self._error_handler = error_handler or ErrorHandler()
        self._logger = logging.getLogger("aida.orchestrator")

        self._initialized = False
        self._started_at: Optional[datetime] = None
        self._stats_lock = threading.Lock()
        self._messages_processed = 0
        self._commands_detected = 0

    def initialize(self) -> None:
        """Build the registry, gate and dialogue handler."""
        if self._initialized:
            return

        self._logger.info("Initializing orchestrator...")

        if self._preprocessor is None:
            try:
                if self.config.registry_path:
                    registry = CommandRegistry.from_yaml(self.config.registry_path)
                else:
                    registry = CommandRegistry.default()
            except (RegistryError, FileNotFoundError) as e:
                self._error_handler.handle(
                    create_registry_error(e, path=self.config.registry_path or "")
                )
                raise
            self._preprocessor = CommandPreprocessor(registry)

        if self._dialogue is None:
            try:
                self._dialogue = create_dialogue(self.config.dialogue)
            except ConfigError as e:
                self._error_handler.handle(create_config_error(e, source="dialogue.handler"))
                raise

        registry = self._preprocessor.registry
        self._logger.info(
            f"Command registry loaded: {len(registry)} intents, "
            f"{registry.trigger_count} triggers"
        )
        self._logger.info(f"Dialogue handler: {self._dialogue.name}")

        self._started_at = datetime.now()
        self._initialized = True

    @property
    def preprocessor(self) -> CommandPreprocessor:
        if self._preprocessor is None:
            self.initialize()
        return self._preprocessor

    @property
    def error_handler(self) -> ErrorHandler:
        return self._error_handler

    def process_message(
        self,
        message: Optional[str],
        session_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> MessageResult:
        """Run the gate, then either dispatch the action or ask the dialogue."""
        if not self._initialized:
            self.initialize()

        start_time = datetime.now()

        with TurnContext() as turn_id:
            self._logger.debug(
                f"Message received from {user_id or 'anonymous'}",
                extra={"session_id": session_id},
            )
            try:
                result = self._route(message, turn_id, session_id)
            except Exception as e:
                error = create_system_error(e, stage="routing")
                result = MessageResult(
                    success=False,
                    route=ROUTE_CONVERSATION,
                    detection=DetectionResult.no_match(coerce_text(message)),
                    turn_id=turn_id,
                    reply=self._error_handler.handle(error),
                    error=error.message,
                )

            result.execution_time_ms = (datetime.now() - start_time).total_seconds() * 1000
            self._record(result)
            log_turn_end(turn_id, success=result.success, route=result.route, error=result.error)

        return result

    def _route(
        self,
        message: Optional[str],
        turn_id: str,
        session_id: Optional[str],
    ) -> MessageResult:
        detection = self._preprocessor.detect(message)

        if not detection.is_command:
            return self._converse(detection, turn_id, session_id)

        result = MessageResult(
            success=True,
            route=ROUTE_COMMAND,
            detection=detection,
            turn_id=turn_id,
            action=self._preprocessor.resolve_action(detection),
        )
        self._logger.info(
            f"Command dispatched: {result.action}",
            extra={"action": result.action, "route": ROUTE_COMMAND, "session_id": session_id},
        )
        return result

    def _converse(
        self,
        detection: DetectionResult,
        turn_id: str,
        session_id: Optional[str],
    ) -> MessageResult:
        try:
            reply = self._dialogue.respond(detection.original_message, session_id=session_id)
        except Exception as e:
            error = create_dialogue_error(e, handler=self._dialogue.name)
            user_message = self._error_handler.handle(error)
            return MessageResult(
                success=False,
                route=ROUTE_CONVERSATION,
                detection=detection,
                turn_id=turn_id,
                reply=user_message,
                error=error.message,
            )

        return MessageResult(
            success=True,
            route=ROUTE_CONVERSATION,
            detection=detection,
            turn_id=turn_id,
            reply=reply,
        )

    def _record(self, result: MessageResult) -> None:
        with self._stats_lock:
            self._messages_processed += 1
            if result.is_command:
                self._commands_detected += 1

    def get_status(self) -> Dict[str, Any]:
        """Get current system status."""
        registry = self._preprocessor.registry if self._preprocessor else None
        uptime = (
            (datetime.now() - self._started_at).total_seconds()
            if self._started_at else 0.0
        )

        with self._stats_lock:
            processed = self._messages_processed
            detected = self._commands_detected

        return {
            "initialized": self._initialized,
            "intents_loaded": len(registry) if registry else 0,
            "triggers_loaded": registry.trigger_count if registry else 0,
            "dialogue": self._dialogue.name if self._dialogue else None,
            "messages_processed": processed,
            "commands_detected": detected,
            "errors": self._error_handler.get_error_stats(),
            "uptime_seconds": uptime,
        }

    def shutdown(self) -> None:
        """Release resources and log final counters."""
        if not self._initialized:
            return
        status = self.get_status()
        self._logger.info(
            f"Shutting down: {status['messages_processed']} messages, "
            f"{status['commands_detected']} commands"
        )
        self._initialized = False
