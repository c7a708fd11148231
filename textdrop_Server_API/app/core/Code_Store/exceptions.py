# exceptions.py
# Description: Exception hierarchy for the ephemeral code store
#
"""
Code Store Exception Hierarchy
==============================

Exception Categories:
- CodeStoreError: Base exception for all code store errors
- EmptyInputError: Text is empty or whitespace-only
- TextTooLongError: Text exceeds the configured length cap
- CodeNotFoundError: Code is unknown or its entry has expired

Running out of generation attempts is not an error: the store falls back to a
timestamp-derived code and logs a warning.
"""

from typing import Optional, Any, Dict


class CodeStoreError(Exception):
    """
    Base exception for all code store errors.

    Attributes:
        operation: The store operation that failed (e.g., "put", "get")
        context: Additional context about the error (code, lengths, etc.)
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.context = context or {}

    def __str__(self) -> str:
        parts = [self.message]

        if self.operation:
            parts.append(f"Operation: {self.operation}")

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"Context: {context_str}")

        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
            "operation": self.operation,
            "context": self.context
        }


class EmptyInputError(CodeStoreError):
    """Raised when text submitted for sharing is empty after trimming."""

    def __init__(self, message: str = "Text must not be empty", **kwargs):
        kwargs.setdefault("operation", "put")
        super().__init__(message, **kwargs)


class TextTooLongError(CodeStoreError):
    """
    Raised when text submitted for sharing is longer than the configured cap.

    Attributes:
        length: Length of the rejected text
        max_length: The configured cap
    """

    def __init__(self, length: int, max_length: int, **kwargs):
        self.length = length
        self.max_length = max_length
        kwargs.setdefault("operation", "put")
        context = kwargs.pop("context", {}) or {}
        context.update({"length": length, "max_length": max_length})
        super().__init__(
            f"Text is {length} characters, the limit is {max_length}",
            context=context,
            **kwargs
        )


class CodeNotFoundError(CodeStoreError):
    """Raised by callers when a code does not resolve to a live entry."""

    def __init__(self, code: str, **kwargs):
        self.code = code
        kwargs.setdefault("operation", "get")
        context = kwargs.pop("context", {}) or {}
        context["code"] = code
        super().__init__("Code not found or expired", context=context, **kwargs)
