"""
Command Preprocessor
--------------------
Detects explicit commands in chat messages before any dialogue routing.

Explicit beats implicit:
- A typed command is always recognised
- Anything that is not an exact trigger is conversation
- Same input, same result

Never raises. The worst case for odd input is a non-command result.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from .normalizer import coerce_text, collapse_whitespace, normalize
from .registry import CommandRegistry, CommandType, TriggerMatch


@dataclass(frozen=True)
class DetectionResult:
    """
    Outcome of running the gate on one message.

    normalized_command is set only when is_command is True.
    original_message is the input exactly as received.
    """
    is_command: bool
    command_type: CommandType
    original_message: str
    normalized_command: Optional[str] = None
    matched_trigger: Optional[str] = None
    locale: Optional[str] = None

    @classmethod
    def no_match(cls, message: str) -> "DetectionResult":
        return cls(
            is_command=False,
            command_type=CommandType.NONE,
            original_message=message,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Render the wire contract (camelCase keys)."""
        data: Dict[str, Any] = {
            "isCommand": self.is_command,
            "commandType": self.command_type.value,
            "originalMessage": self.original_message,
        }
        if self.normalized_command is not None:
            data["normalizedCommand"] = self.normalized_command
        return data

    def __repr__(self) -> str:
        if not self.is_command:
            return "DetectionResult(no command)"
        return (
            f"DetectionResult({self.command_type.value} -> {self.normalized_command}, "
            f"trigger={self.matched_trigger!r})"
        )


class CommandPreprocessor:
    """
    Exact-match command gate.

    Usage:
        preprocessor = CommandPreprocessor(CommandRegistry.default())
        result = preprocessor.detect("/gallery")
        action = preprocessor.resolve_action(result)  # "show_gallery"
    """

    def __init__(self, registry: Optional[CommandRegistry] = None):
        self._registry = registry if registry is not None else CommandRegistry.default()
        self._logger = logging.getLogger("aida.commands.preprocessor")

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    def detect(self, message: Optional[Any]) -> DetectionResult:
        """Classify a raw message as command or conversation."""
        original = coerce_text(message)
        normalized = normalize(original)

        if not normalized:
            return DetectionResult.no_match(original)

        match = self._match(normalized)
        if match is None:
            return DetectionResult.no_match(original)

        command_type = match.intent.command_type
        self._logger.info(
            f"{command_type.value.title()} command detected",
            extra={
                "original_message": original,
                "normalized": normalized,
                "command_type": command_type.value,
                "matched_trigger": match.trigger,
            },
        )

        return DetectionResult(
            is_command=True,
            command_type=command_type,
            original_message=original,
            normalized_command=match.intent.action,
            matched_trigger=match.trigger,
            locale=match.locale,
        )

    def _match(self, normalized: str) -> Optional[TriggerMatch]:
        # Slash commands compare on the trimmed form, phrases after collapsing
        # interior whitespace runs.
        match = self._registry.match_command(normalized)
        if match is not None:
            return match
        return self._registry.match_phrase(collapse_whitespace(normalized))

    def resolve_action(self, result: DetectionResult) -> Optional[str]:
        """Map a detection result to its canonical action token, or None."""
        if not result.is_command:
            return None

        intent = self._registry.get(result.command_type)
        if intent is None:
            return None
        return intent.action
