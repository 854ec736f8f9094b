"""Built-in graph validators, in default pipeline order"""

from collections import deque

from callflow.compiler.dag import FlowGraph
from callflow.compiler.references import iter_references
from callflow.core.types import ActionKind
from callflow.validation.base import GraphValidator
from callflow.validation.findings import ValidationFinding
from callflow.validation.registry import ValidatorRegistry


def _walk(graph: FlowGraph) -> list[str]:
    """Ids reachable from the entry, in breadth-first order."""
    if graph.entry is None or graph.entry not in graph.nodes:
        return []
    seen = {graph.entry}
    order = [graph.entry]
    queue = deque([graph.entry])
    while queue:
        node = graph.nodes[queue.popleft()]
        for target in node.transitions.targets():
            if target in graph.nodes and target not in seen:
                seen.add(target)
                order.append(target)
                queue.append(target)
    return order


@ValidatorRegistry.register("non-empty")
class NonEmptyValidator(GraphValidator):
    """The flow must contain at least one action."""

    aborts = True

    def check(self, graph: FlowGraph) -> list[ValidationFinding]:
        if graph.nodes:
            return []
        return [self.finding(f"Flow '{graph.name}' has no actions")]


@ValidatorRegistry.register("unique-ids")
class UniqueIdsValidator(GraphValidator):
    """No two actions share an identifier.

    The allocator already guarantees this for builder graphs; hand-made
    graphs can still store a node under the wrong key.
    """

    aborts = True

    def check(self, graph: FlowGraph) -> list[ValidationFinding]:
        findings: list[ValidationFinding] = []
        seen: dict[str, str] = {}
        for key, node in graph.nodes.items():
            if key != node.id:
                findings.append(
                    self.finding(f"Action '{node.id}' is stored under key '{key}'", node.id)
                )
            if node.id in seen:
                findings.append(
                    self.finding(
                        f"Duplicate action identifier '{node.id}' "
                        f"(keys '{seen[node.id]}' and '{key}')",
                        node.id,
                    )
                )
            else:
                seen[node.id] = key
        return findings


@ValidatorRegistry.register("entry-point")
class EntryPointValidator(GraphValidator):
    """The entry must name an existing action."""

    aborts = True

    def check(self, graph: FlowGraph) -> list[ValidationFinding]:
        if graph.entry is None:
            return [self.finding("Flow has no entry action")]
        if graph.entry not in graph.nodes:
            return [self.finding(f"Entry action '{graph.entry}' does not exist", graph.entry)]
        return []


@ValidatorRegistry.register("reachability")
class ReachabilityValidator(GraphValidator):
    """Every action must be reachable from the entry.

    Unreachable actions are reported, never removed.
    """

    def check(self, graph: FlowGraph) -> list[ValidationFinding]:
        reachable = set(_walk(graph))
        return [
            self.finding(
                f"Action '{node_id}' is not reachable from entry '{graph.entry}'", node_id
            )
            for node_id in graph.nodes
            if node_id not in reachable
        ]


@ValidatorRegistry.register("dangling-transitions")
class DanglingTransitionsValidator(GraphValidator):
    def check(self, graph: FlowGraph) -> list[ValidationFinding]:
        findings: list[ValidationFinding] = []
        for node in graph:
            for target in node.transitions.targets():
                if target not in graph.nodes:
                    findings.append(
                        self.finding(
                            f"Transition from '{node.id}' points to missing action '{target}'",
                            node.id,
                        )
                    )
            for _edge in node.transitions.unlinked():
                findings.append(
                    self.finding(
                        f"Branch of '{node.id}' has no target; it continued to a point "
                        f"where no action was appended",
                        node.id,
                    )
                )
        return findings


@ValidatorRegistry.register("terminal-present")
class TerminalPresentValidator(GraphValidator):
    """At least one path from the entry must end the contact's flow."""

    def check(self, graph: FlowGraph) -> list[ValidationFinding]:
        if any(graph.nodes[node_id].is_terminal for node_id in _walk(graph)):
            return []
        return [
            self.finding(
                f"No path from entry '{graph.entry}' reaches a terminal action "
                f"(disconnect, end or transfer)"
            )
        ]


@ValidatorRegistry.register("external-invocation")
class ExternalInvocationValidator(GraphValidator):
    """External function calls must carry a resolved, non-empty address."""

    def check(self, graph: FlowGraph) -> list[ValidationFinding]:
        findings: list[ValidationFinding] = []
        for node in graph:
            if node.kind != ActionKind.INVOKE_EXTERNAL:
                continue
            address = node.parameters.get("LambdaFunctionARN")
            pending = list(iter_references(address))
            if pending:
                findings.append(
                    self.finding(
                        f"External invocation '{node.id}' calls unregistered function "
                        f"'{pending[0].name}'",
                        node.id,
                    )
                )
            elif not isinstance(address, str) or not address.strip():
                findings.append(
                    self.finding(
                        f"External invocation '{node.id}' has no resolved function address "
                        f"(got {address!s})",
                        node.id,
                    )
                )
        return findings


@ValidatorRegistry.register("terminal-transitions")
class TerminalTransitionsValidator(GraphValidator):
    """Terminal actions cannot continue to a next action."""

    def check(self, graph: FlowGraph) -> list[ValidationFinding]:
        return [
            self.finding(
                f"Terminal action '{node.id}' ({node.kind.name}) has a next action "
                f"'{node.transitions.next}'",
                node.id,
            )
            for node in graph
            if node.is_terminal and node.transitions.next is not None
        ]


DEFAULT_ORDER = [
    "non-empty",
    "unique-ids",
    "entry-point",
    "reachability",
    "dangling-transitions",
    "terminal-present",
    "external-invocation",
    "terminal-transitions",
]
