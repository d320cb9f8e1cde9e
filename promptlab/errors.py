"""Custom exceptions for the prompt lab."""

from typing import Optional


class PromptLabError(Exception):
    """Base exception for prompt lab errors."""


class BatchLimitExceeded(PromptLabError):
    """Raised when a batch asks for more tasks than the configured ceiling."""

    def __init__(self, limit: int, max_batch_size: int):
        super().__init__(
            f"requested batch size {limit} exceeds the safe maximum {max_batch_size}"
        )
        self.limit = limit
        self.max_batch_size = max_batch_size


class RefineError(PromptLabError):
    """Raised when the refinement call fails or returns no text."""

    def __init__(self, message: str, model: Optional[str] = None):
        super().__init__(message)
        self.model = model


class LabRecordNotFound(PromptLabError, KeyError):
    """Raised when a store update targets an id that does not exist."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class InvalidStatusTransition(PromptLabError, ValueError):
    """Raised when a lab run is moved out of a terminal status."""
