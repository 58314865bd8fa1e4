"""
Custom Exception Classes
========================

Every failure in a workflow run is fatal; these types only say where it
happened. Nothing is retried.
"""

from typing import Any


class BraggingRightsError(Exception):
    """Base exception for the workflow."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(BraggingRightsError):
    """Raised when configuration or prompt input is invalid."""

    pass


class ModelUnavailableError(BraggingRightsError):
    """Raised when the Ollama runtime cannot provide a model."""

    pass


class LLMError(BraggingRightsError):
    """Raised when LLM inference fails."""

    pass


class EmbeddingError(BraggingRightsError):
    """Raised when embedding generation fails."""

    pass


class DatabaseError(BraggingRightsError):
    """Raised when database operations fail."""

    pass


class RetrievalError(BraggingRightsError):
    """Raised when a similarity search yields nothing to guess from."""

    pass


class WorkflowError(BraggingRightsError):
    """Raised when workflow steps are invoked out of order."""

    pass
