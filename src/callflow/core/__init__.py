"""Core types and errors."""

from callflow.core.errors import (
    AbortingValidationError,
    BuilderUsageError,
    CallflowError,
    CompilationError,
    ConfigError,
    GraphValidationError,
    TraceError,
    UnresolvedReference,
    UnresolvedReferenceError,
)
from callflow.core.types import ActionKind, ErrorKind, FallbackTrigger, InputMode, Severity

__all__ = [
    "ActionKind",
    "ErrorKind",
    "FallbackTrigger",
    "InputMode",
    "Severity",
    "CallflowError",
    "BuilderUsageError",
    "ConfigError",
    "CompilationError",
    "UnresolvedReference",
    "UnresolvedReferenceError",
    "GraphValidationError",
    "AbortingValidationError",
    "TraceError",
]
