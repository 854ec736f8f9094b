"""Retry loop expansion.

A node whose RetrySpec allows more than one attempt gets one synthesized
Loop node between itself and the handlers of its retryable errors:

    node --Timeout--> handler

becomes

    node --Timeout--> loop --ContinueLooping--> [retry prompt -->] node
                          \\--DoneLooping--> handler

`LoopCount` is `max_attempts - 1`: the loop continues on failures 1..N-1
and only the Nth failure reaches a handler, exactly once.

The Loop node is the attempt budget, so a node never gets more than one.
When retryable errors lead to different handlers, each failure first records
its kind in the `RETRY_EXIT_ATTRIBUTE` contact attribute, and DoneLooping
enters a Compare on that attribute. The handler of the last failure runs:

    node --Timeout--> set(timeout) --\\
    node --NoMatch--> set(no_match) --> loop --DoneLooping--> compare
                                                   timeout --> timeout handler
                                                   no_match --> no-match handler
"""

import logging

from callflow.compiler.dag import ActionNode, Condition, ConditionEdge, ErrorEdge, FlowGraph
from callflow.core.types import CONTINUE_LOOPING, DONE_LOOPING, ActionKind, ErrorKind

logger = logging.getLogger(__name__)

RETRY_EXIT_ATTRIBUTE = "RetryExit"


class LoopExpander:
    """Rewrites nodes with `retry.max_attempts > 1` into explicit retry loops."""

    def expand(self, graph: FlowGraph) -> list[str]:
        """Expand every retrying node of `graph` in place.

        Returns:
            Ids of the Loop nodes created
        """
        created: list[str] = []
        for node in list(graph):
            retry = node.retry
            if retry is None or retry.max_attempts <= 1:
                continue

            # Retryable edges grouped by handler, in edge order
            groups: dict[str, list[ErrorEdge]] = {}
            for edge in node.transitions.errors:
                if edge.kind in retry.retry_on and edge.target is not None:
                    groups.setdefault(edge.target, []).append(edge)

            if not groups:
                logger.debug(
                    f"Node '{node.id}' allows {retry.max_attempts} attempts but has no "
                    f"retryable error handlers; nothing to expand",
                    extra={"node_id": node.id},
                )
                continue

            if len(groups) == 1:
                handler, edges = next(iter(groups.items()))
                loop = self._synthesize(graph, node, handler)
                for edge in edges:
                    edge.target = loop.id
            else:
                loop = self._synthesize_dispatch(graph, node, groups)
            created.append(loop.id)
        return created

    def _synthesize(self, graph: FlowGraph, node: ActionNode, exit_target: str) -> ActionNode:
        retry = node.retry
        assert retry is not None
        loop = graph.new_node(
            ActionKind.LOOP,
            f"{node.id}_retry",
            {"LoopCount": str(retry.max_attempts - 1)},
        )

        retry_entry = node.id
        if retry.retry_prompt:
            prompt = graph.new_node(
                ActionKind.MESSAGE, f"{node.id}_retry_prompt", {"Text": retry.retry_prompt}
            )
            prompt.transitions.next = node.id
            retry_entry = prompt.id

        loop.transitions.conditions = [
            ConditionEdge(Condition(operands=(CONTINUE_LOOPING,)), target=retry_entry),
            ConditionEdge(Condition(operands=(DONE_LOOPING,)), target=exit_target),
        ]
        logger.debug(
            f"Expanded retry loop '{loop.id}' for '{node.id}' "
            f"({retry.max_attempts} attempts, exhausted -> '{exit_target}')",
            extra={"node_id": node.id, "loop_id": loop.id},
        )
        return loop

    def _synthesize_dispatch(
        self, graph: FlowGraph, node: ActionNode, groups: dict[str, list[ErrorEdge]]
    ) -> ActionNode:
        """One loop shared by several handlers, dispatched on the last failure kind."""
        markers: list[tuple[str, ActionNode, list[ErrorEdge]]] = []
        for handler, edges in groups.items():
            value = _exit_value(edges[0].kind)
            marker = graph.new_node(
                ActionKind.SET_ATTRIBUTES,
                f"{node.id}_failed_{value}",
                {"Attributes": {RETRY_EXIT_ATTRIBUTE: value}},
            )
            markers.append((handler, marker, edges))

        dispatch = graph.new_node(
            ActionKind.CHECK_ATTRIBUTE,
            f"{node.id}_retry_exit",
            {"ComparisonValue": f"$.Attributes.{RETRY_EXIT_ATTRIBUTE}"},
        )
        loop = self._synthesize(graph, node, dispatch.id)

        for handler, marker, edges in markers:
            marker.transitions.next = loop.id
            for edge in edges:
                edge.target = marker.id
            dispatch.transitions.conditions.append(
                ConditionEdge(Condition(operands=(_exit_value(edges[0].kind),)), target=handler)
            )
        # Unset attribute: handler of the first failure kind
        dispatch.transitions.errors.append(ErrorEdge(ErrorKind.NO_MATCH, target=markers[0][0]))
        return loop


def _exit_value(kind: ErrorKind) -> str:
    return kind.name.lower()
