# Core module - Orchestrator, dialogue handlers and error handling
# Every chat message goes through the Orchestrator: command gate first

from .orchestrator import (
    Orchestrator, OrchestratorConfig, MessageResult,
    ROUTE_COMMAND, ROUTE_CONVERSATION,
)
from .dialogue import DialogueHandler, MockDialogue, create_dialogue
from .errors import ErrorHandler, AidaError, ErrorCategory, create_config_error

__all__ = [
    "Orchestrator", "OrchestratorConfig", "MessageResult",
    "ROUTE_COMMAND", "ROUTE_CONVERSATION",
    "DialogueHandler", "MockDialogue", "create_dialogue",
    "ErrorHandler", "AidaError", "ErrorCategory", "create_config_error",
]
