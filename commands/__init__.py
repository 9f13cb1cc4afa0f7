# Commands module - Command detection gate
# Exact-match trigger lookup only: no LLM logic, no fuzzy matching

from .normalizer import normalize, normalize_phrase, collapse_whitespace
from .registry import (
    CommandRegistry, CommandType, IntentTriggers, TriggerMatch,
    RegistryError, DEFAULT_REGISTRY_PATH,
)
from .preprocessor import CommandPreprocessor, DetectionResult

__all__ = [
    "normalize",
    "normalize_phrase",
    "collapse_whitespace",
    "CommandRegistry",
    "CommandType",
    "IntentTriggers",
    "TriggerMatch",
    "RegistryError",
    "DEFAULT_REGISTRY_PATH",
    "CommandPreprocessor",
    "DetectionResult",
]
