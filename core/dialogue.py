"""
Dialogue Handlers
-----------------
The conversational pipeline that receives every message the command gate
does not claim. The real pipeline is an LLM service; MockDialogue stands in
for it in tests and local runs.
"""

from typing import Dict, Optional, Type

from infra.config import ConfigError

GALLERY_PROPOSAL = (
    "Want to check out the style gallery? "
    "Use the /gallery or show styles command anytime!"
)


class DialogueHandler:
    """Base class for conversational handlers."""

    name = "base"

    def respond(self, message: str, session_id: Optional[str] = None) -> str:
        raise NotImplementedError


class MockDialogue(DialogueHandler):
    """Deterministic replies, no LLM calls."""

    name = "mock"

    def respond(self, message: str, session_id: Optional[str] = None) -> str:
        if not message.strip():
            return "I'm listening. What would you like to create?"
        return f"You said: {message.strip()}\n\n{GALLERY_PROPOSAL}"


DIALOGUE_HANDLERS: Dict[str, Type[DialogueHandler]] = {
    MockDialogue.name: MockDialogue,
}


def create_dialogue(name: str) -> DialogueHandler:
    """Instantiate a registered dialogue handler by name."""
    handler_cls = DIALOGUE_HANDLERS.get(name)
    if handler_cls is None:
        available = ", ".join(sorted(DIALOGUE_HANDLERS))
        raise ConfigError(f"Unknown dialogue handler: {name!r} (available: {available})")
    return handler_cls()
