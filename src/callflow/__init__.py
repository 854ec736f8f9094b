"""callflow - compile call-handling flows into contact-flow documents.

A fluent builder (or a YAML flow definition) describes prompts, input
collection, branching, external function calls and transfers. Building
resolves named resources, expands retry loops and speech/keypad fallbacks,
validates the action graph and serializes it to the contact-flow JSON
format.

Quick start:
    from callflow import FlowBuilder, ReferenceKind, ResourceReferenceRegistry

    registry = ResourceReferenceRegistry()
    registry.register(ReferenceKind.QUEUE, "Sales", "arn:aws:connect:...:queue/sales")

    flow = FlowBuilder("Welcome")
    flow.play_prompt("Thanks for calling.").transfer_to_queue("Sales")
    print(flow.build(registry).to_json())
"""

from callflow.__version__ import __version__
from callflow.compiler.builder import BranchBuilder, FlowBuilder
from callflow.compiler.flow_compiler import FlowCompiler, SerializedFlow
from callflow.compiler.references import (
    PendingReference,
    ReferenceKind,
    ResourceReferenceRegistry,
)
from callflow.compiler.specs import FallbackInput, InputSpec, PrimaryInput, RetrySpec
from callflow.config.settings import CompilerSettings
from callflow.core.errors import (
    AbortingValidationError,
    BuilderUsageError,
    CallflowError,
    CompilationError,
    ConfigError,
    GraphValidationError,
    UnresolvedReferenceError,
)
from callflow.core.types import ActionKind, ErrorKind, FallbackTrigger, InputMode, Severity
from callflow.flows.registry import FlowCatalog, flow
from callflow.validation.pipeline import ValidationPipeline

__all__ = [
    # Version info
    "__version__",
    # Building
    "FlowBuilder",
    "BranchBuilder",
    "FlowCompiler",
    "SerializedFlow",
    "FlowCatalog",
    "flow",
    "ValidationPipeline",
    "CompilerSettings",
    # References
    "PendingReference",
    "ReferenceKind",
    "ResourceReferenceRegistry",
    # Specifications and types
    "InputSpec",
    "PrimaryInput",
    "FallbackInput",
    "RetrySpec",
    "ActionKind",
    "ErrorKind",
    "FallbackTrigger",
    "InputMode",
    "Severity",
    # Errors
    "CallflowError",
    "BuilderUsageError",
    "ConfigError",
    "CompilationError",
    "UnresolvedReferenceError",
    "GraphValidationError",
    "AbortingValidationError",
]
