"""Render an action graph into the contact-flow JSON wire format.

Pure functions: the graph is never mutated. Callers are expected to have
resolved and validated it (FlowCompiler does both before serializing).
"""

import json
from typing import Any

from callflow.compiler.dag import ActionNode, FlowGraph
from callflow.compiler.references import PendingReference

FLOW_VERSION = "2019-10-30"


def serialize(
    graph: FlowGraph,
    *,
    version: str = FLOW_VERSION,
    metadata: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the wire document for `graph`.

    Actions keep graph insertion order, so equal graphs give equal output.
    """
    return {
        "Version": version,
        "StartAction": graph.entry,
        "Metadata": {"Name": graph.name, **(metadata or {})},
        "Actions": [serialize_node(node) for node in graph],
    }


def serialize_node(node: ActionNode) -> dict[str, Any]:
    transitions: dict[str, Any] = {}
    if node.transitions.next is not None:
        transitions["NextAction"] = node.transitions.next
    transitions["Conditions"] = [
        {"NextAction": edge.target, "Condition": edge.condition.to_wire()}
        for edge in node.transitions.conditions
    ]
    transitions["Errors"] = [
        {"NextAction": edge.target, "ErrorType": edge.kind.value}
        for edge in node.transitions.errors
    ]
    return {
        "Identifier": node.id,
        "Type": node.kind.value,
        "Parameters": _render(node.parameters),
        "Transitions": transitions,
    }


def _render(value: Any) -> Any:
    # Unresolved references only survive in debug snapshots
    if isinstance(value, PendingReference):
        return str(value)
    if isinstance(value, dict):
        return {key: _render(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_render(item) for item in value]
    return value


def to_json(document: dict[str, Any], indent: int | None = 2) -> str:
    return json.dumps(document, indent=indent, ensure_ascii=False)


def render_placeholders(graph: FlowGraph) -> str:
    """JSON of an unresolved graph, references shown as `{{Kind:name}}`."""
    return to_json(serialize(graph))
