"""
AIDA Test Configuration
-----------------------
Shared fixtures and configuration for all tests.
"""

import sys
import textwrap
from pathlib import Path
from typing import List, Optional

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from commands import CommandPreprocessor, CommandRegistry
from core import DialogueHandler, Orchestrator


GALLERY_COMMANDS = ["/gallery", "/stili", "/styles"]

GALLERY_PHRASES = [
    "mostra gallery",
    "mostra stili",
    "apri galleria",
    "show gallery",
    "show styles",
    "open gallery",
]


class RecordingDialogue(DialogueHandler):
    """Dialogue stub that records what it was asked."""

    name = "recording"

    def __init__(self, reply: str = "ok", fail_with: Optional[Exception] = None):
        self.reply = reply
        self.fail_with = fail_with
        self.calls: List[str] = []

    def respond(self, message: str, session_id: Optional[str] = None) -> str:
        self.calls.append(message)
        if self.fail_with is not None:
            raise self.fail_with
        return self.reply


@pytest.fixture(scope="session")
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def registry():
    """Registry loaded from the packaged trigger map."""
    return CommandRegistry.default()


@pytest.fixture
def preprocessor(registry):
    return CommandPreprocessor(registry)


@pytest.fixture
def dialogue():
    return RecordingDialogue(reply="Tell me more about your video.")


@pytest.fixture
def orchestrator(preprocessor, dialogue):
    orch = Orchestrator(preprocessor=preprocessor, dialogue=dialogue)
    orch.initialize()
    yield orch
    orch.shutdown()


@pytest.fixture
def write_registry(tmp_path):
    """Write a YAML trigger map to a temp file and return its path."""
    def _write(content: str, name: str = "command_map.yaml") -> Path:
        path = tmp_path / name
        path.write_text(textwrap.dedent(content), encoding="utf-8")
        return path
    return _write
