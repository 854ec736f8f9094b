"""Fluent builder that appends action nodes to a FlowGraph.

Every call appends one node, links the open ends of the cursor to it and
moves the cursor to the new node. Branching calls return a branch set whose
handlers receive a `BranchBuilder`: a short-lived view over the same graph
whose first node is registered as a condition or error target of the
originating node. `then_continue()` hands a branch's open ends to the join
point of the branching call, so branches converge on whatever the parent
appends next instead of duplicating the rest of the flow.

Usage:
    flow = FlowBuilder("MainMenu")
    flow.play_prompt("Welcome to Example Corp.")
    (
        flow.collect_input("Press 1 for sales, 2 for support.", max_attempts=3)
        .on_digit("1", lambda b: b.transfer_to_queue("Sales"))
        .on_digit("2", lambda b: b.play_prompt("Connecting you.").then_continue())
        .on_timeout(lambda b: b.disconnect())
    )
    flow.transfer_to_queue("Support")
    result = flow.build(registry)
"""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Self

from callflow.compiler.dag import (
    ActionNode,
    Condition,
    ConditionEdge,
    ErrorEdge,
    FlowGraph,
    InputMatch,
)
from callflow.compiler.references import PendingReference, ReferenceKind
from callflow.compiler.specs import InputSpec, RetrySpec
from callflow.core.errors import BuilderUsageError
from callflow.core.types import CONTINUE_LOOPING, DONE_LOOPING, ActionKind, ErrorKind, InputMode

if TYPE_CHECKING:
    from callflow.compiler.flow_compiler import SerializedFlow
    from callflow.compiler.references import ResourceReferenceRegistry
    from callflow.config.settings import CompilerSettings
    from callflow.validation.pipeline import ValidationPipeline

logger = logging.getLogger(__name__)

# Sets the target of one outgoing edge
Link = Callable[[str], None]
BranchHandler = Callable[["BranchBuilder"], object]

COMPARISON_OPERATORS = frozenset(
    {
        "Equals",
        "NumberGreaterThan",
        "NumberGreaterOrEqualTo",
        "NumberLessThan",
        "NumberLessOrEqualTo",
        "TextStartsWith",
        "TextEndsWith",
        "TextContains",
    }
)
STAFFING_METRICS = frozenset({"Available", "Staffed", "Online"})


class JoinPoint:
    """Open edges waiting for the next node appended at this point.

    Resolving links every waiting edge; edges added afterwards link
    immediately. A join point can be forwarded to another one, which then
    receives both its waiting and its future edges.
    """

    def __init__(self, links: list[Link] | None = None):
        self._links: list[Link] = list(links or [])
        self._target: str | None = None
        self._forward: "JoinPoint | None" = None

    @property
    def target(self) -> str | None:
        return self._target

    @property
    def has_open_ends(self) -> bool:
        return bool(self._links)

    def add(self, link: Link) -> None:
        if self._target is not None:
            link(self._target)
        elif self._forward is not None:
            self._forward.add(link)
        else:
            self._links.append(link)

    def resolve(self, target: str) -> None:
        links, self._links = self._links, []
        self._target = target
        for link in links:
            link(target)

    def forward_to(self, other: "JoinPoint") -> None:
        links, self._links = self._links, []
        self._forward = other
        for link in links:
            other.add(link)


def _ref(kind: ReferenceKind, name: str | PendingReference) -> PendingReference:
    if isinstance(name, PendingReference):
        return name
    if not name or not name.strip():
        raise BuilderUsageError(f"{kind.value} name cannot be empty")
    return PendingReference(kind=kind, name=name)


class FlowBuilder:
    """Root builder of one flow. Not thread-safe: one builder per flow."""

    def __init__(self, name: str, *, graph: FlowGraph | None = None):
        if not name or not name.strip():
            raise BuilderUsageError("Flow name cannot be empty")
        self.name = name
        self._graph = graph if graph is not None else FlowGraph(name=name)
        self._cursor = JoinPoint()
        self._last: ActionNode | None = None
        self._terminated_by: str | None = None
        self._closed_reason: str | None = None

    @property
    def graph(self) -> FlowGraph:
        """The unresolved graph under construction."""
        return self._graph

    @property
    def last_node(self) -> ActionNode | None:
        """Most recently appended node of this builder."""
        return self._last

    @property
    def is_terminated(self) -> bool:
        return self._terminated_by is not None

    # --- internals -------------------------------------------------------

    def _ensure_open(self) -> None:
        if self._terminated_by is not None:
            raise BuilderUsageError(
                f"Cannot append to flow '{self.name}' after terminal action "
                f"'{self._terminated_by}'"
            )
        if self._closed_reason is not None:
            raise BuilderUsageError(f"Cannot append to flow '{self.name}': {self._closed_reason}")

    def _append(
        self,
        kind: ActionKind,
        hint: str | None,
        parameters: dict[str, Any],
        node_id: str | None = None,
        *,
        branching: bool = False,
    ) -> ActionNode:
        self._ensure_open()
        node = self._graph.new_node(kind, hint or kind.name, parameters, node_id=node_id)
        self._cursor.resolve(node.id)
        self._last = node

        if kind.is_terminal:
            self._cursor = JoinPoint()
            self._terminated_by = node.id
        elif branching:
            # Branches converge here through then_continue()
            self._cursor = JoinPoint()
        else:
            self._cursor = JoinPoint([_next_link(node)])

        logger.debug(
            f"Appended {kind.name} node '{node.id}' to flow '{self.name}'",
            extra={"flow_name": self.name, "node_id": node.id, "kind": kind.name},
        )
        return node

    def _join_for_errors(self) -> JoinPoint | None:
        # Error handlers of the last node continue wherever its next would go
        return None if self.is_terminated else self._cursor

    # --- linear actions --------------------------------------------------

    def play_prompt(
        self,
        text: str | None = None,
        *,
        ssml: str | None = None,
        label: str | None = None,
        node_id: str | None = None,
    ) -> Self:
        """Play a text or SSML message to the caller."""
        if (text is None) == (ssml is None):
            raise BuilderUsageError("play_prompt() needs exactly one of text or ssml")
        parameters = {"Text": text} if text is not None else {"SSML": ssml}
        self._append(ActionKind.MESSAGE, label or "message", parameters, node_id)
        return self

    def store_input(
        self,
        prompt: str,
        *,
        max_digits: int = 20,
        timeout_seconds: int = 5,
        encrypt: bool = False,
        label: str | None = None,
        node_id: str | None = None,
    ) -> Self:
        """Collect a keypad entry into the stored customer input."""
        if max_digits < 1:
            raise BuilderUsageError("max_digits must be >= 1")
        parameters: dict[str, Any] = {
            "Text": prompt,
            "StoreInput": "True",
            "InputTimeLimitSeconds": str(timeout_seconds),
            "InputValidation": {"CustomValidation": {"MaximumLength": str(max_digits)}},
        }
        if encrypt:
            parameters["InputEncryption"] = {"EncryptionKeyId": "default"}
        self._append(ActionKind.STORE_INPUT, label or "store_input", parameters, node_id)
        return self

    def invoke_external(
        self,
        function: str | PendingReference,
        *,
        parameters: dict[str, Any] | None = None,
        timeout_seconds: int = 8,
        response_validation: str = "STRING_MAP",
        label: str | None = None,
        node_id: str | None = None,
    ) -> Self:
        """Invoke a registered external function (resolved to its ARN at build)."""
        if not 1 <= timeout_seconds <= 8:
            raise BuilderUsageError("timeout_seconds must be between 1 and 8")
        reference = _ref(ReferenceKind.EXTERNAL_FUNCTION, function)
        node_parameters: dict[str, Any] = {
            "LambdaFunctionARN": reference,
            "InvocationTimeLimitSeconds": str(timeout_seconds),
            "InvocationType": "SYNCHRONOUS",
            "ResponseValidation": {"ResponseType": response_validation},
        }
        if parameters:
            node_parameters["LambdaInvocationAttributes"] = dict(parameters)
        self._append(
            ActionKind.INVOKE_EXTERNAL,
            label or f"invoke_{reference.name}",
            node_parameters,
            node_id,
        )
        return self

    def set_attributes(
        self,
        attributes: dict[str, Any] | None = None,
        /,
        *,
        label: str | None = None,
        node_id: str | None = None,
        **kwargs: Any,
    ) -> Self:
        """Set contact attributes (values may be PendingReference placeholders)."""
        merged = {**(attributes or {}), **kwargs}
        if not merged:
            raise BuilderUsageError("set_attributes() needs at least one attribute")
        self._append(
            ActionKind.SET_ATTRIBUTES, label or "set_attributes", {"Attributes": merged}, node_id
        )
        return self

    def get_metrics(
        self,
        queue: str | PendingReference | None = None,
        *,
        label: str | None = None,
        node_id: str | None = None,
    ) -> Self:
        """Load queue metrics into the flow ($.Metrics) for later checks."""
        parameters: dict[str, Any] = {}
        if queue is not None:
            parameters["QueueId"] = _ref(ReferenceKind.QUEUE, queue)
        self._append(ActionKind.GET_METRICS, label or "get_metrics", parameters, node_id)
        return self

    def hold(
        self,
        seconds: int,
        *,
        label: str | None = None,
        node_id: str | None = None,
    ) -> Self:
        """Keep the caller waiting for `seconds`."""
        if seconds < 1:
            raise BuilderUsageError("hold() needs a positive duration")
        self._append(ActionKind.HOLD, label or "hold", {"TimeoutSeconds": str(seconds)}, node_id)
        return self

    # --- terminal actions ------------------------------------------------

    def transfer_to_queue(
        self,
        queue: str | PendingReference,
        *,
        label: str | None = None,
        node_id: str | None = None,
    ) -> Self:
        reference = _ref(ReferenceKind.QUEUE, queue)
        self._append(
            ActionKind.TRANSFER_TO_QUEUE,
            label or f"transfer_{reference.name}",
            {"QueueId": reference},
            node_id,
        )
        return self

    def transfer_to_flow(
        self,
        flow: str | PendingReference,
        *,
        label: str | None = None,
        node_id: str | None = None,
    ) -> Self:
        reference = _ref(ReferenceKind.FLOW, flow)
        self._append(
            ActionKind.TRANSFER_TO_FLOW,
            label or f"transfer_{reference.name}",
            {"ContactFlowId": reference},
            node_id,
        )
        return self

    def transfer_to_external(
        self,
        phone_number: str,
        *,
        timeout_seconds: int = 30,
        caller_id: str | None = None,
        label: str | None = None,
        node_id: str | None = None,
    ) -> Self:
        if not phone_number:
            raise BuilderUsageError("transfer_to_external() needs a phone number")
        parameters: dict[str, Any] = {
            "ThirdPartyPhoneNumber": phone_number,
            "ThirdPartyConnectionTimeLimitSeconds": str(timeout_seconds),
            "ContinueFlowExecution": "False",
        }
        if caller_id:
            parameters["CallerId"] = {"Number": caller_id}
        self._append(
            ActionKind.TRANSFER_TO_EXTERNAL, label or "transfer_external", parameters, node_id
        )
        return self

    def disconnect(self, *, label: str | None = None, node_id: str | None = None) -> Self:
        self._append(ActionKind.DISCONNECT, label or "disconnect", {}, node_id)
        return self

    def end_execution(self, *, label: str | None = None, node_id: str | None = None) -> Self:
        self._append(ActionKind.END_EXECUTION, label or "end", {}, node_id)
        return self

    def jump_to(self, node_id: str) -> Self:
        """Route the open ends to an existing (or later declared) node id.

        Nothing can be appended to this builder afterwards.
        """
        self._ensure_open()
        if not node_id:
            raise BuilderUsageError("jump_to() needs a node id")
        self._cursor.resolve(node_id)
        self._cursor = JoinPoint()
        self._closed_reason = f"flow jumped to '{node_id}'"
        return self

    def on_error(self, kind: ErrorKind | str, handler: BranchHandler) -> Self:
        """Handle an error of the most recently appended node."""
        if self._last is None:
            raise BuilderUsageError("on_error() needs a preceding action")
        if isinstance(kind, ErrorKind):
            error_kind = kind
        else:
            try:
                error_kind = ErrorKind.from_name(kind)
            except ValueError as e:
                raise BuilderUsageError(str(e)) from e
        node = self._last
        if any(edge.kind == error_kind for edge in node.transitions.errors):
            raise BuilderUsageError(f"Node '{node.id}' already handles {error_kind.value}")
        edge = ErrorEdge(kind=error_kind)
        node.transitions.errors.append(edge)
        join = self._join_for_errors()
        _run_branch(self, _edge_link(edge), join, handler, f"{error_kind.value} handler")
        return self

    # --- branching actions -----------------------------------------------

    def collect_input(
        self,
        prompt: str,
        *,
        max_digits: int = 1,
        timeout_seconds: int = 5,
        mode: InputMode = InputMode.DTMF,
        lex_bot: str | None = None,
        max_attempts: int = 1,
        retry_prompt: str | None = None,
        label: str | None = None,
        node_id: str | None = None,
    ) -> "InputBranches":
        """Prompt the caller and branch on the result.

        With `max_attempts > 1` the retryable error handlers (timeout,
        no match, invalid input, low confidence) only run after the last
        attempt fails; `retry_prompt` is played before each retry.
        """
        if max_attempts < 1:
            raise BuilderUsageError("max_attempts must be >= 1")
        if max_digits < 1:
            raise BuilderUsageError("max_digits must be >= 1")
        parameters: dict[str, Any] = {
            "Text": prompt,
            "StoreInput": "False",
            "InputTimeLimitSeconds": str(timeout_seconds),
        }
        if mode == InputMode.DTMF:
            parameters["InputValidation"] = {
                "CustomValidation": {"MaximumLength": str(max_digits)}
            }
        elif lex_bot:
            parameters["LexV2Bot"] = {"AliasArn": lex_bot}

        node = self._append(
            ActionKind.COLLECT_INPUT, label or "collect_input", parameters, node_id, branching=True
        )
        node.input_mode = mode
        if max_attempts > 1:
            node.retry = RetrySpec(max_attempts=max_attempts, retry_prompt=retry_prompt)
        return InputBranches(self, node, self._cursor, modes={mode})

    def collect_sequential_input(
        self,
        spec: InputSpec,
        *,
        label: str | None = None,
        node_id: str | None = None,
    ) -> "InputBranches":
        """Speech first, keypad on the configured fallback triggers.

        The node is split into its two stages during build; see
        `callflow.compiler.sequential`.
        """
        parameters: dict[str, Any] = {
            "Text": spec.primary.prompt,
            "StoreInput": "False",
            "InputTimeLimitSeconds": str(spec.primary.timeout_seconds),
        }
        node = self._append(
            ActionKind.COLLECT_INPUT,
            label or "sequential_input",
            parameters,
            node_id,
            branching=True,
        )
        node.input_spec = spec
        node.input_mode = spec.primary.mode
        modes = {spec.primary.mode}
        if spec.enable_fallback and spec.fallback is not None:
            modes.add(spec.fallback.mode)
        return InputBranches(self, node, self._cursor, modes=modes)

    def check_attribute(
        self,
        attribute: str,
        *,
        namespace: str = "Attributes",
        label: str | None = None,
        node_id: str | None = None,
    ) -> "AttributeBranches":
        """Branch on the value of a contact attribute."""
        if not attribute:
            raise BuilderUsageError("check_attribute() needs an attribute name")
        node = self._append(
            ActionKind.CHECK_ATTRIBUTE,
            label or f"check_{attribute}",
            {"ComparisonValue": f"$.{namespace}.{attribute}"},
            node_id,
            branching=True,
        )
        return AttributeBranches(self, node, self._cursor)

    def check_hours(
        self,
        hours: str | PendingReference | None = None,
        *,
        label: str | None = None,
        node_id: str | None = None,
    ) -> "HoursBranches":
        """Branch on the hours of operation (the current queue's when `hours` is None)."""
        parameters: dict[str, Any] = {}
        if hours is not None:
            parameters["Hours"] = _ref(ReferenceKind.HOURS_OF_OPERATION, hours)
        node = self._append(
            ActionKind.CHECK_HOURS, label or "check_hours", parameters, node_id, branching=True
        )
        return HoursBranches(self, node, self._cursor)

    def check_staffing(
        self,
        queue: str | PendingReference | None = None,
        *,
        status: str = "Available",
        label: str | None = None,
        node_id: str | None = None,
    ) -> "StaffingBranches":
        """Branch on whether agents are available, staffed or online for a queue."""
        if status not in STAFFING_METRICS:
            raise BuilderUsageError(
                f"Unknown staffing status '{status}'. Available: {sorted(STAFFING_METRICS)}"
            )
        parameters: dict[str, Any] = {"MetricType": f"NumberOfAgents{status}"}
        if queue is not None:
            parameters["QueueId"] = _ref(ReferenceKind.QUEUE, queue)
        node = self._append(
            ActionKind.CHECK_STAFFING,
            label or "check_staffing",
            parameters,
            node_id,
            branching=True,
        )
        return StaffingBranches(self, node, self._cursor)

    def split_percent(
        self, *, label: str | None = None, node_id: str | None = None
    ) -> "PercentBranches":
        """Randomly distribute callers across buckets."""
        node = self._append(ActionKind.BRANCH, label or "split", {}, node_id, branching=True)
        return PercentBranches(self, node, self._cursor)

    def loop(
        self,
        times: int,
        body: BranchHandler,
        *,
        label: str | None = None,
        node_id: str | None = None,
    ) -> Self:
        """Run `body` `times` times, then continue after the loop.

        The body's open ends loop back to the Loop node automatically.
        """
        if times < 1:
            raise BuilderUsageError("loop() needs times >= 1")
        node = self._append(
            ActionKind.LOOP, label or "loop", {"LoopCount": str(times)}, node_id, branching=True
        )
        back = JoinPoint()
        back.resolve(node.id)
        continue_edge = ConditionEdge(Condition(operands=(CONTINUE_LOOPING,)))
        node.transitions.conditions.append(continue_edge)
        sub = _run_branch(self, _edge_link(continue_edge), back, body, "loop body")
        if not sub.is_terminated and sub._closed_reason is None:
            sub.then_continue()

        done_edge = ConditionEdge(Condition(operands=(DONE_LOOPING,)))
        node.transitions.conditions.append(done_edge)
        self._cursor = JoinPoint([_edge_link(done_edge)])
        return self

    # --- build -----------------------------------------------------------

    def build(
        self,
        registry: "ResourceReferenceRegistry | None" = None,
        *,
        settings: "CompilerSettings | None" = None,
        pipeline: "ValidationPipeline | None" = None,
    ) -> "SerializedFlow":
        """Resolve, expand, validate and serialize this flow.

        The builder's graph is copied, so building twice yields identical
        output and the builder stays usable.

        Raises:
            UnresolvedReferenceError: If referenced resources are not registered
            GraphValidationError: If the graph is structurally invalid
        """
        from callflow.compiler.flow_compiler import FlowCompiler

        compiler = FlowCompiler(registry=registry, settings=settings, pipeline=pipeline)
        return compiler.compile(self._graph)


class BranchBuilder(FlowBuilder):
    """Transient view over the parent's graph for one branch handler."""

    def __init__(self, parent: FlowBuilder, origin: Link, join: JoinPoint | None):
        super().__init__(parent.name, graph=parent.graph)
        self._cursor = JoinPoint([origin])
        self._join = join
        self._continued = False

    @property
    def is_empty(self) -> bool:
        return self._last is None and not self._continued and self._closed_reason is None

    def then_continue(self) -> None:
        """Re-join the parent flow at the node the parent appends next."""
        if self._continued:
            raise BuilderUsageError("then_continue() called twice on the same branch")
        if self._terminated_by is not None:
            raise BuilderUsageError(
                f"Cannot continue a branch that ended with terminal action '{self._terminated_by}'"
            )
        if self._closed_reason is not None:
            raise BuilderUsageError(f"Cannot continue branch: {self._closed_reason}")
        if self._join is None:
            raise BuilderUsageError("Nothing to continue to after a terminal action")
        self._cursor.forward_to(self._join)
        self._continued = True
        self._closed_reason = "branch already continued"

    def build(self, *args: Any, **kwargs: Any) -> "SerializedFlow":
        raise BuilderUsageError("build() must be called on the root FlowBuilder")


def _next_link(node: ActionNode) -> Link:
    def link(target: str) -> None:
        node.transitions.next = target

    return link


def _edge_link(edge: ConditionEdge | ErrorEdge) -> Link:
    def link(target: str) -> None:
        edge.target = target

    return link


def _run_branch(
    parent: FlowBuilder,
    origin: Link,
    join: JoinPoint | None,
    handler: BranchHandler,
    description: str,
) -> BranchBuilder:
    sub = BranchBuilder(parent, origin, join)
    handler(sub)
    if sub.is_empty:
        raise BuilderUsageError(
            f"{description} in flow '{parent.name}' added no actions; "
            f"call then_continue() to rejoin the flow"
        )
    return sub


class BranchSet:
    """Handlers of one branching node. Every method returns the set for chaining."""

    def __init__(self, builder: FlowBuilder, node: ActionNode, join: JoinPoint):
        self._builder = builder
        self.node = node
        self._join = join
        self._condition_keys: set[tuple[str, ...]] = set()

    def then(self) -> FlowBuilder:
        """Back to the builder that owns this branching node."""
        return self._builder

    def _add_condition(
        self,
        condition: Condition | InputMatch,
        handler: BranchHandler,
        key: tuple[str, ...],
    ) -> Self:
        if key in self._condition_keys:
            raise BuilderUsageError(f"Node '{self.node.id}' already has a branch for {key}")
        self._condition_keys.add(key)
        edge = ConditionEdge(condition=condition)
        self.node.transitions.conditions.append(edge)
        _run_branch(self._builder, _edge_link(edge), self._join, handler, f"branch {key}")
        return self

    def _add_error(self, kind: ErrorKind, handler: BranchHandler) -> Self:
        if any(edge.kind == kind for edge in self.node.transitions.errors):
            raise BuilderUsageError(f"Node '{self.node.id}' already handles {kind.value}")
        edge = ErrorEdge(kind=kind)
        self.node.transitions.errors.append(edge)
        _run_branch(self._builder, _edge_link(edge), self._join, handler, f"{kind.value} handler")
        return self

    def on_error(self, handler: BranchHandler) -> Self:
        return self._add_error(ErrorKind.ERROR, handler)


class InputBranches(BranchSet):
    """Branches of a CollectInput node."""

    def __init__(
        self,
        builder: FlowBuilder,
        node: ActionNode,
        join: JoinPoint,
        modes: set[InputMode],
    ):
        super().__init__(builder, node, join)
        self._modes = modes

    def _require(self, mode: InputMode, what: str) -> None:
        if mode not in self._modes:
            raise BuilderUsageError(
                f"{what} needs {mode.value} input, node '{self.node.id}' collects "
                f"{sorted(m.value for m in self._modes)}"
            )

    def on_digit(self, digits: str, handler: BranchHandler) -> Self:
        """Handle a keypad entry."""
        self._require(InputMode.DTMF, "on_digit()")
        return self._add_condition(InputMatch(digits=digits), handler, ("digits", digits))

    def on_intent(self, intent: str, handler: BranchHandler) -> Self:
        """Handle a recognized intent."""
        self._require(InputMode.ASR, "on_intent()")
        return self._add_condition(InputMatch(intent=intent), handler, ("intent", intent))

    def on_input(
        self,
        handler: BranchHandler,
        *,
        digits: str | None = None,
        intent: str | None = None,
    ) -> Self:
        """Handle an intent or a keypad entry with the same handler."""
        if digits is None and intent is None:
            raise BuilderUsageError("on_input() needs digits, intent, or both")
        if digits is not None:
            self._require(InputMode.DTMF, "on_input(digits=...)")
        if intent is not None:
            self._require(InputMode.ASR, "on_input(intent=...)")
        key = ("input", digits or "", intent or "")
        for part in (("digits", digits), ("intent", intent)):
            if part[1] is not None and part in self._condition_keys:
                raise BuilderUsageError(f"Node '{self.node.id}' already has a branch for {part}")
        if digits is not None:
            self._condition_keys.add(("digits", digits))
        if intent is not None:
            self._condition_keys.add(("intent", intent))
        return self._add_condition(InputMatch(digits=digits, intent=intent), handler, key)

    def on_timeout(self, handler: BranchHandler) -> Self:
        return self._add_error(ErrorKind.TIMEOUT, handler)

    def on_no_match(self, handler: BranchHandler) -> Self:
        return self._add_error(ErrorKind.NO_MATCH, handler)

    def otherwise(self, handler: BranchHandler) -> Self:
        """Alias of on_no_match()."""
        return self.on_no_match(handler)

    def on_invalid_input(self, handler: BranchHandler) -> Self:
        return self._add_error(ErrorKind.INVALID_INPUT, handler)

    def on_low_confidence(self, handler: BranchHandler) -> Self:
        self._require(InputMode.ASR, "on_low_confidence()")
        return self._add_error(ErrorKind.LOW_CONFIDENCE, handler)


class AttributeBranches(BranchSet):
    """Branches of a CheckAttribute (Compare) node."""

    def when(self, operator: str, value: str, handler: BranchHandler) -> Self:
        if operator not in COMPARISON_OPERATORS:
            raise BuilderUsageError(
                f"Unknown comparison operator '{operator}'. "
                f"Available: {sorted(COMPARISON_OPERATORS)}"
            )
        value = str(value)
        return self._add_condition(
            Condition(operands=(value,), operator=operator), handler, (operator, value)
        )

    def when_equals(self, value: str, handler: BranchHandler) -> Self:
        return self.when("Equals", value, handler)

    def otherwise(self, handler: BranchHandler) -> Self:
        return self._add_error(ErrorKind.NO_MATCH, handler)


class HoursBranches(BranchSet):
    """Branches of a CheckHours node."""

    def in_hours(self, handler: BranchHandler) -> Self:
        return self._add_condition(Condition(operands=("True",)), handler, ("in_hours",))

    def out_of_hours(self, handler: BranchHandler) -> Self:
        return self._add_condition(Condition(operands=("False",)), handler, ("out_of_hours",))


class StaffingBranches(BranchSet):
    """Branches of a CheckStaffing node."""

    def staffed(self, handler: BranchHandler) -> Self:
        return self._add_condition(
            Condition(operands=("0",), operator="NumberGreaterThan"), handler, ("staffed",)
        )

    def not_staffed(self, handler: BranchHandler) -> Self:
        return self._add_error(ErrorKind.NO_MATCH, handler)


class PercentBranches(BranchSet):
    """Buckets of a percentage split. Buckets are cumulative in declaration order."""

    def __init__(self, builder: FlowBuilder, node: ActionNode, join: JoinPoint):
        super().__init__(builder, node, join)
        self._allocated = 0

    def bucket(self, percent: int, handler: BranchHandler) -> Self:
        if percent < 1 or self._allocated + percent > 100:
            raise BuilderUsageError(
                f"Bucket of {percent}% exceeds the remaining {100 - self._allocated}%"
            )
        self._allocated += percent
        upper = str(self._allocated)
        return self._add_condition(
            Condition(operands=(upper,), operator="NumberLessThan"), handler, ("bucket", upper)
        )

    def otherwise(self, handler: BranchHandler) -> Self:
        return self._add_error(ErrorKind.NO_MATCH, handler)
