"""
Error Handling Module
---------------------
Typed error records with classification and user-facing messages.

The command gate itself never raises; these records cover what happens
around it (dialogue failures, broken configuration, unexpected crashes).
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, List, Optional
import logging
import traceback


class ErrorCategory(Enum):
    """Categories of errors for handling decisions."""
    REGISTRY_ERROR = auto()     # Trigger map could not be loaded
    CONFIG_ERROR = auto()       # Configuration file unusable
    DIALOGUE_FAILURE = auto()   # Conversational pipeline failed
    SYSTEM_ERROR = auto()       # Internal system error


@dataclass
class AidaError:
    """
    Structured error with metadata.

    Used for consistent error handling and reporting.
    """
    category: ErrorCategory
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=datetime.now)
    stack_trace: Optional[str] = None
    recoverable: bool = True

    @classmethod
    def from_exception(
        cls,
        exception: Exception,
        category: ErrorCategory,
        details: Optional[Dict] = None
    ) -> "AidaError":
        """Create error from an exception."""
        return cls(
            category=category,
            message=str(exception) or type(exception).__name__,
            details=details,
            stack_trace=traceback.format_exc(),
            recoverable=category not in {
                ErrorCategory.SYSTEM_ERROR,
                ErrorCategory.REGISTRY_ERROR,
                ErrorCategory.CONFIG_ERROR,
            }
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.name,
            "message": self.message,
            "details": self.details or {},
            "timestamp": self.timestamp.isoformat(),
            "recoverable": self.recoverable,
        }

    def __repr__(self) -> str:
        return f"AidaError({self.category.name}: {self.message})"


class ErrorHandler:
    """
    Central error handler with logging and a bounded history.
    """

    LEVELS: Dict[ErrorCategory, int] = {
        ErrorCategory.DIALOGUE_FAILURE: logging.ERROR,
        ErrorCategory.REGISTRY_ERROR: logging.CRITICAL,
        ErrorCategory.CONFIG_ERROR: logging.CRITICAL,
        ErrorCategory.SYSTEM_ERROR: logging.CRITICAL,
    }

    MESSAGES: Dict[ErrorCategory, str] = {
        ErrorCategory.REGISTRY_ERROR: "Commands are unavailable right now.",
        ErrorCategory.CONFIG_ERROR: "The service is misconfigured. Please contact support.",
        ErrorCategory.DIALOGUE_FAILURE: "I'm having trouble answering that. Please try again.",
        ErrorCategory.SYSTEM_ERROR: "Something went wrong internally. Please try again later.",
    }

    def __init__(self, max_history: int = 100):
        self._logger = logging.getLogger("aida.errors")
        self._error_history: List[AidaError] = []
        self._max_history = max_history

    def handle(self, error: AidaError) -> str:
        """
        Handle an error and return a user-friendly message.
        """
        self._log_error(error)

        self._error_history.append(error)
        if len(self._error_history) > self._max_history:
            self._error_history.pop(0)

        return self.MESSAGES.get(error.category, "An error occurred.")

    def _log_error(self, error: AidaError) -> None:
        """Log error with appropriate level."""
        level = self.LEVELS.get(error.category, logging.ERROR)

        self._logger.log(
            level,
            f"{error.category.name}: {error.message}",
            extra={"error": error.message}
        )

        if error.stack_trace and level >= logging.ERROR:
            self._logger.debug(f"Stack trace:\n{error.stack_trace}")

    def get_error_stats(self) -> Dict[str, int]:
        """Get error counts by category."""
        stats: Dict[str, int] = {}
        for error in self._error_history:
            key = error.category.name
            stats[key] = stats.get(key, 0) + 1
        return stats

    def get_history(self) -> List[AidaError]:
        return list(self._error_history)

    def clear_history(self) -> None:
        """Clear error history."""
        self._error_history.clear()


# Convenience functions

def create_config_error(exception: Exception, source: str = "") -> AidaError:
    """Create a configuration error (bad config.yaml, unknown handler name)."""
    return AidaError.from_exception(
        exception,
        ErrorCategory.CONFIG_ERROR,
        details={"source": source},
    )


def create_system_error(exception: Exception, stage: str = "") -> AidaError:
    """Create an internal error for a failure nothing else classifies."""
    return AidaError.from_exception(
        exception,
        ErrorCategory.SYSTEM_ERROR,
        details={"stage": stage, "type": type(exception).__name__},
    )


def create_dialogue_error(exception: Exception, handler: str = "") -> AidaError:
    """Create a dialogue failure from the exception the handler raised."""
    return AidaError.from_exception(
        exception,
        ErrorCategory.DIALOGUE_FAILURE,
        details={"handler": handler, "type": type(exception).__name__},
    )


def create_registry_error(exception: Exception, path: str = "") -> AidaError:
    """Create a registry load error."""
    return AidaError.from_exception(
        exception,
        ErrorCategory.REGISTRY_ERROR,
        details={"path": path},
    )
