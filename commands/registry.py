"""
Command Registry
----------------
Immutable trigger vocabulary for deterministic command detection.
No LLM logic. No fuzzy matching. Only exact lookups.

Each intent owns two trigger sets:
- commands: slash tokens ("/gallery")
- phrases:  short multi-word phrases ("mostra gallery")

The registry is built once at startup and passed to whoever needs it.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple
import logging

import yaml

from .normalizer import collapse_whitespace

DEFAULT_REGISTRY_PATH = Path(__file__).parent / "command_map.yaml"

logger = logging.getLogger("aida.commands.registry")


class RegistryError(Exception):
    """Raised when a trigger map violates the registry invariants."""
    pass


class CommandType(Enum):
    """Closed set of intents the gate can recognise."""
    GALLERY = "GALLERY"
    NONE = "NONE"


@dataclass(frozen=True)
class IntentTriggers:
    """Trigger sets and canonical action for one intent."""
    command_type: CommandType
    action: str
    commands: FrozenSet[str]
    phrases: FrozenSet[str]
    description: str = ""
    locales: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({}), compare=False, hash=False
    )

    def __repr__(self) -> str:
        return (
            f"IntentTriggers(type={self.command_type.value}, action={self.action}, "
            f"commands={len(self.commands)}, phrases={len(self.phrases)})"
        )


@dataclass(frozen=True)
class TriggerMatch:
    """An exact hit in the registry."""
    intent: IntentTriggers
    trigger: str
    kind: str  # "command" or "phrase"

    @property
    def locale(self) -> Optional[str]:
        return self.intent.locales.get(self.trigger)


def _check_command(trigger: str) -> None:
    if not trigger:
        raise RegistryError("Empty slash command")
    if trigger != trigger.lower():
        raise RegistryError(f"Slash command must be lowercase: {trigger!r}")
    if any(ch.isspace() for ch in trigger):
        raise RegistryError(f"Slash command must not contain whitespace: {trigger!r}")
    if not trigger.startswith("/"):
        raise RegistryError(f"Slash command must start with '/': {trigger!r}")


def _check_phrase(trigger: str) -> None:
    if not trigger.strip():
        raise RegistryError("Empty phrase")
    if trigger != trigger.lower():
        raise RegistryError(f"Phrase must be lowercase: {trigger!r}")
    if trigger != collapse_whitespace(trigger.strip()):
        raise RegistryError(f"Phrase must be trimmed and single-spaced: {trigger!r}")


class CommandRegistry:
    """
    Read-only registry mapping intents to their trigger sets.

    Invariants (checked in __init__):
    - commands are lowercase, whitespace-free and start with '/'
    - phrases are lowercase, trimmed and single-spaced
    - commands and phrases are disjoint, and no trigger has two owners
    - NONE is never registered; every intent has an action
    """

    def __init__(self, intents: Iterable[IntentTriggers]):
        by_type: Dict[CommandType, IntentTriggers] = {}
        command_index: Dict[str, IntentTriggers] = {}
        phrase_index: Dict[str, IntentTriggers] = {}

        for intent in intents:
            if intent.command_type is CommandType.NONE:
                raise RegistryError("CommandType.NONE cannot be registered")
            if intent.command_type in by_type:
                raise RegistryError(f"Duplicate intent: {intent.command_type.value}")
            if not intent.action or not intent.action.strip():
                raise RegistryError(f"Intent {intent.command_type.value} has no action")

            for trigger in intent.commands:
                _check_command(trigger)
                owner = command_index.get(trigger)
                if owner is not None:
                    raise RegistryError(
                        f"Trigger {trigger!r} already registered for {owner.command_type.value}"
                    )
                command_index[trigger] = intent

            for trigger in intent.phrases:
                _check_phrase(trigger)
                owner = phrase_index.get(trigger)
                if owner is not None:
                    raise RegistryError(
                        f"Trigger {trigger!r} already registered for {owner.command_type.value}"
                    )
                phrase_index[trigger] = intent

            by_type[intent.command_type] = intent

        overlap = set(command_index) & set(phrase_index)
        if overlap:
            raise RegistryError(f"Triggers used as both command and phrase: {sorted(overlap)}")

        self._intents = MappingProxyType(by_type)
        self._commands = MappingProxyType(command_index)
        self._phrases = MappingProxyType(phrase_index)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_yaml(cls, registry_path) -> "CommandRegistry":
        """Load a registry from a YAML trigger map."""
        path = Path(registry_path)

        if not path.exists():
            raise FileNotFoundError(f"Command registry not found: {registry_path}")

        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise RegistryError(f"Invalid YAML in {path}: {e}") from e

        registry = cls.from_dict(data)
        logger.debug(
            f"Loaded {len(registry)} intents ({registry.trigger_count} triggers) from {path}"
        )
        return registry

    @classmethod
    def from_dict(cls, data: Any) -> "CommandRegistry":
        """Build a registry from an already-parsed trigger map."""
        if not isinstance(data, dict):
            raise RegistryError("Trigger map must be a mapping with an 'intents' list")

        raw_intents = data.get("intents", [])
        if not isinstance(raw_intents, list):
            raise RegistryError("'intents' must be a list")

        return cls(_parse_intent(item) for item in raw_intents)

    @classmethod
    def default(cls) -> "CommandRegistry":
        """Load the trigger map shipped with the package."""
        return cls.from_yaml(DEFAULT_REGISTRY_PATH)

    # ------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------

    def match_command(self, normalized: str) -> Optional[TriggerMatch]:
        """Exact lookup among slash commands."""
        intent = self._commands.get(normalized)
        if intent is None:
            return None
        return TriggerMatch(intent=intent, trigger=normalized, kind="command")

    def match_phrase(self, collapsed: str) -> Optional[TriggerMatch]:
        """Exact lookup among phrases."""
        intent = self._phrases.get(collapsed)
        if intent is None:
            return None
        return TriggerMatch(intent=intent, trigger=collapsed, kind="phrase")

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    def get(self, command_type: CommandType) -> Optional[IntentTriggers]:
        """Get the triggers registered for an intent."""
        return self._intents.get(command_type)

    def list_intents(self) -> List[IntentTriggers]:
        """List all registered intents."""
        return list(self._intents.values())

    @property
    def commands(self) -> FrozenSet[str]:
        return frozenset(self._commands)

    @property
    def phrases(self) -> FrozenSet[str]:
        return frozenset(self._phrases)

    @property
    def trigger_count(self) -> int:
        return len(self._commands) + len(self._phrases)

    def __len__(self) -> int:
        return len(self._intents)

    def __contains__(self, command_type: CommandType) -> bool:
        return command_type in self._intents

    def __repr__(self) -> str:
        types = ", ".join(t.value for t in self._intents)
        return f"CommandRegistry(intents=[{types}], triggers={self.trigger_count})"


def _parse_intent(item: Any) -> IntentTriggers:
    """Parse one entry of the 'intents' list."""
    if not isinstance(item, dict):
        raise RegistryError(f"Intent entry must be a mapping, got {type(item).__name__}")

    type_name = item.get("type")
    if not type_name:
        raise RegistryError("Intent entry is missing 'type'")
    try:
        command_type = CommandType(str(type_name).upper())
    except ValueError:
        raise RegistryError(f"Unknown intent type: {type_name!r}") from None

    commands = item.get("commands", []) or []
    if not isinstance(commands, list) or not all(isinstance(c, str) for c in commands):
        raise RegistryError(f"'commands' of {command_type.value} must be a list of strings")

    phrases, locales = _parse_phrases(command_type, item.get("phrases", []) or [])

    return IntentTriggers(
        command_type=command_type,
        action=str(item.get("action") or ""),
        commands=frozenset(commands),
        phrases=frozenset(phrases),
        description=str(item.get("description") or ""),
        locales=MappingProxyType(locales),
    )


def _parse_phrases(command_type: CommandType, raw: Any) -> Tuple[List[str], Dict[str, str]]:
    """
    Phrases are either a flat list or a mapping of locale -> list.
    Returns the flat list and a trigger -> locale map.
    """
    if isinstance(raw, list):
        groups = [(None, raw)]
    elif isinstance(raw, dict):
        groups = list(raw.items())
    else:
        raise RegistryError(f"'phrases' of {command_type.value} must be a list or mapping")

    phrases: List[str] = []
    locales: Dict[str, str] = {}

    for locale, entries in groups:
        if not isinstance(entries, list) or not all(isinstance(p, str) for p in entries):
            raise RegistryError(f"'phrases' of {command_type.value} must contain strings")
        for phrase in entries:
            if phrase in phrases:
                raise RegistryError(f"Phrase {phrase!r} listed twice for {command_type.value}")
            phrases.append(phrase)
            if locale is not None:
                locales[phrase] = str(locale)

    return phrases, locales
