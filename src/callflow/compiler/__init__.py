"""Flow builder, action graph and expansion passes.

The build pipeline (`FlowCompiler`, `SerializedFlow`) is imported from
`callflow.compiler.flow_compiler` or the top-level package.
"""

from callflow.compiler.builder import BranchBuilder, FlowBuilder, JoinPoint
from callflow.compiler.dag import (
    ActionNode,
    Condition,
    ConditionEdge,
    ErrorEdge,
    FlowGraph,
    InputMatch,
    Transitions,
)
from callflow.compiler.ids import IdentifierAllocator
from callflow.compiler.references import (
    PendingReference,
    ReferenceKind,
    ResourceReferenceRegistry,
)
from callflow.compiler.specs import FallbackInput, InputSpec, PrimaryInput, RetrySpec

__all__ = [
    "ActionNode",
    "BranchBuilder",
    "Condition",
    "ConditionEdge",
    "ErrorEdge",
    "FallbackInput",
    "FlowBuilder",
    "FlowGraph",
    "IdentifierAllocator",
    "InputMatch",
    "InputSpec",
    "JoinPoint",
    "PendingReference",
    "PrimaryInput",
    "ReferenceKind",
    "ResourceReferenceRegistry",
    "RetrySpec",
    "Transitions",
]
