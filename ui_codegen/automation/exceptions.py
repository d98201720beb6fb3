"""Custom exception types for the recording engine."""

from __future__ import annotations


class CodegenError(RuntimeError):
    """Base class for recording/codegen failures."""


class RecordingNotActiveError(CodegenError):
    """Raised when a session API is called while recording is not in progress."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"Recording is not in progress; call start() before {operation}()")
        self.operation = operation


class UnknownEventError(CodegenError):
    """Raised when a transport payload does not describe a known raw event."""
