"""Action graph structures produced by the flow builder."""

import copy
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from callflow.compiler.ids import IdentifierAllocator
from callflow.compiler.specs import InputSpec, RetrySpec
from callflow.core.types import ActionKind, ErrorKind, InputMode


@dataclass(frozen=True)
class Condition:
    """Predicate on the result of a branching node."""

    operands: tuple[str, ...]
    operator: str = "Equals"

    def to_wire(self) -> dict[str, Any]:
        return {"Operator": self.operator, "Operands": list(self.operands)}


@dataclass(frozen=True)
class InputMatch:
    """Input result predicate keyed by DTMF digits, an ASR intent, or both.

    Lowered to a plain `Condition` for the input stage it lands on during
    expansion, which lets a digit and an intent target one handler.
    """

    digits: str | None = None
    intent: str | None = None

    def lower(self, mode: InputMode) -> Condition | None:
        """Condition for an input stage in `mode`, None if this match has no key for it."""
        key = self.digits if mode == InputMode.DTMF else self.intent
        if key is None:
            return None
        return Condition(operands=(key,))

    def to_wire(self) -> dict[str, Any]:
        # Only reached when serializing a graph that skipped expansion
        operands = [key for key in (self.intent, self.digits) if key is not None]
        return {"Operator": "Equals", "Operands": operands}


@dataclass
class ConditionEdge:
    condition: Condition | InputMatch
    # None until the branch it leads to gets its first node
    target: str | None = None


@dataclass
class ErrorEdge:
    kind: ErrorKind
    target: str | None = None


@dataclass
class Transitions:
    """Outgoing edges of a node."""

    next: str | None = None
    conditions: list[ConditionEdge] = field(default_factory=list)
    errors: list[ErrorEdge] = field(default_factory=list)

    def targets(self) -> list[str]:
        """Every linked node id: next, then conditions, then errors."""
        result: list[str] = []
        if self.next is not None:
            result.append(self.next)
        result.extend(edge.target for edge in self.conditions if edge.target is not None)
        result.extend(edge.target for edge in self.errors if edge.target is not None)
        return result

    def unlinked(self) -> list[ConditionEdge | ErrorEdge]:
        """Edges whose branch never received a target."""
        edges: list[ConditionEdge | ErrorEdge] = [*self.conditions, *self.errors]
        return [edge for edge in edges if edge.target is None]

    def error_target(self, kind: ErrorKind) -> str | None:
        for edge in self.errors:
            if edge.kind == kind:
                return edge.target
        return None


@dataclass
class ActionNode:
    """One unit of flow behaviour.

    `retry`, `input_spec`, `input_mode` and `label` are compiler metadata
    consumed by the expansion passes and the CLI; only id, kind, parameters
    and transitions are serialized.
    """

    id: str
    kind: ActionKind
    parameters: dict[str, Any] = field(default_factory=dict)
    transitions: Transitions = field(default_factory=Transitions)
    retry: RetrySpec | None = None
    input_spec: InputSpec | None = None
    input_mode: InputMode | None = None
    label: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.kind.is_terminal


@dataclass
class FlowGraph:
    """Arena of action nodes keyed by id.

    The graph is the only owner of its nodes. Builders keep a cursor into it,
    never their own copies of node data.
    """

    name: str
    nodes: dict[str, ActionNode] = field(default_factory=dict)
    entry: str | None = None
    allocator: IdentifierAllocator = field(default_factory=IdentifierAllocator)
    resolved: bool = False

    def add(self, node: ActionNode) -> ActionNode:
        """Insert a node; the first node added becomes the entry."""
        self.nodes[node.id] = node
        if self.entry is None:
            self.entry = node.id
        return node

    def new_node(
        self,
        kind: ActionKind,
        hint: str,
        parameters: dict[str, Any] | None = None,
        node_id: str | None = None,
    ) -> ActionNode:
        """Allocate an id (or reserve an explicit one) and add a fresh node."""
        if node_id is not None:
            identifier = self.allocator.reserve(node_id)
        else:
            identifier = self.allocator.allocate(hint, default=kind.name)
        return self.add(
            ActionNode(id=identifier, kind=kind, parameters=parameters or {}, label=hint)
        )

    def get(self, node_id: str) -> ActionNode:
        return self.nodes[node_id]

    def copy(self) -> "FlowGraph":
        """Deep copy, allocator state included."""
        return copy.deepcopy(self)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __iter__(self) -> Iterator[ActionNode]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)
