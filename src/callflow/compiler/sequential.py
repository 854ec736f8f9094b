"""Sequential input expansion: speech first, keypad as fallback.

A node built with `collect_sequential_input()` is split into two chained
CollectInput nodes. The original node keeps its id and becomes the primary
(speech) stage, so every edge that pointed at it still does. A fallback
(keypad) stage is allocated next to it:

    primary --Timeout/NoMatch/...--> fallback --user error edges--> handlers
       \\--error kinds not in the trigger set--> user handlers

Result routing is lowered per stage: intents on the primary, digits on the
fallback. One `on_input(digits=..., intent=...)` handler is therefore
reachable from both stages.

Plain `collect_input()` nodes only get their result conditions lowered.
"""

import logging
from typing import Any

from callflow.compiler.dag import ActionNode, ConditionEdge, ErrorEdge, FlowGraph, InputMatch
from callflow.compiler.specs import FallbackInput, InputSpec, PrimaryInput, RetrySpec
from callflow.core.errors import BuilderUsageError
from callflow.core.types import (
    TRIGGER_ERROR_KINDS,
    ActionKind,
    ErrorKind,
    FallbackTrigger,
    InputMode,
)

logger = logging.getLogger(__name__)


def _stage_parameters(stage: PrimaryInput | FallbackInput) -> dict[str, Any]:
    parameters: dict[str, Any] = {
        "Text": stage.prompt,
        "StoreInput": "False",
        "InputTimeLimitSeconds": str(stage.timeout_seconds),
    }
    if stage.mode == InputMode.DTMF:
        parameters["InputValidation"] = {
            "CustomValidation": {"MaximumLength": str(stage.max_digits)}
        }
    else:
        if stage.lex_bot:
            parameters["LexV2Bot"] = {"AliasArn": stage.lex_bot}
        parameters["IntentConfidenceThreshold"] = str(stage.confidence_threshold)
    return parameters


def lower_conditions(
    edges: list[ConditionEdge], mode: InputMode, *, strict: bool
) -> list[ConditionEdge]:
    """Rewrite InputMatch conditions into plain conditions for an input stage.

    Args:
        edges: Condition edges of the node being lowered
        mode: Input mode of the stage
        strict: Raise when a match has no key for `mode` (single-stage inputs);
            otherwise such matches belong to the other stage and are skipped

    Raises:
        BuilderUsageError: In strict mode, for a match the stage cannot satisfy
    """
    lowered: list[ConditionEdge] = []
    for edge in edges:
        if not isinstance(edge.condition, InputMatch):
            lowered.append(edge)
            continue
        condition = edge.condition.lower(mode)
        if condition is None:
            if strict:
                raise BuilderUsageError(
                    f"Input branch {edge.condition} cannot match {mode.value} input"
                )
            continue
        lowered.append(ConditionEdge(condition=condition, target=edge.target))
    return lowered


class SequentialInputCompiler:
    """Expands input specifications into their final CollectInput nodes."""

    def expand(self, graph: FlowGraph) -> list[str]:
        """Expand every CollectInput node of `graph` in place.

        Returns:
            Ids of the fallback nodes created
        """
        created: list[str] = []
        for node in list(graph):
            if node.kind != ActionKind.COLLECT_INPUT:
                continue
            spec = node.input_spec
            if spec is None:
                mode = node.input_mode or InputMode.DTMF
                node.transitions.conditions = lower_conditions(
                    node.transitions.conditions, mode, strict=True
                )
            elif not spec.enable_fallback:
                self._single_stage(node, spec)
            else:
                created.append(self._split(graph, node, spec))
        return created

    def _single_stage(self, node: ActionNode, spec: InputSpec) -> None:
        node.parameters = _stage_parameters(spec.primary)
        node.input_mode = spec.primary.mode
        node.transitions.conditions = lower_conditions(
            node.transitions.conditions, spec.primary.mode, strict=True
        )
        if spec.primary.max_retries > 1:
            node.retry = RetrySpec(max_attempts=spec.primary.max_retries)
        node.input_spec = None

    def _split(self, graph: FlowGraph, node: ActionNode, spec: InputSpec) -> str:
        assert spec.fallback is not None
        fallback = graph.new_node(
            ActionKind.COLLECT_INPUT,
            f"{node.id}_{spec.fallback.mode.value}",
            _stage_parameters(spec.fallback),
        )
        fallback.input_mode = spec.fallback.mode

        user_conditions = node.transitions.conditions
        user_errors = node.transitions.errors
        trigger_kinds = _trigger_kinds(spec.fallback_triggers)

        # Primary: one edge per trigger to the fallback, the rest straight to the user
        primary_errors = [ErrorEdge(kind=kind, target=fallback.id) for kind in trigger_kinds]
        primary_errors.extend(
            ErrorEdge(kind=edge.kind, target=edge.target)
            for edge in user_errors
            if edge.kind not in trigger_kinds
        )
        node.parameters = _stage_parameters(spec.primary)
        node.input_mode = spec.primary.mode
        node.transitions.conditions = lower_conditions(
            user_conditions, spec.primary.mode, strict=False
        )
        node.transitions.errors = primary_errors

        fallback.transitions.conditions = lower_conditions(
            user_conditions, spec.fallback.mode, strict=False
        )
        fallback.transitions.errors = [
            ErrorEdge(kind=edge.kind, target=edge.target) for edge in user_errors
        ]

        if FallbackTrigger.MAX_RETRIES in spec.fallback_triggers and spec.primary.max_retries > 1:
            node.retry = RetrySpec(
                max_attempts=spec.primary.max_retries, retry_on=frozenset(trigger_kinds)
            )
        else:
            node.retry = None
        if spec.fallback.max_retries > 1:
            fallback.retry = RetrySpec(max_attempts=spec.fallback.max_retries)
        node.input_spec = None

        logger.debug(
            f"Split sequential input '{node.id}' into '{node.id}' + '{fallback.id}' "
            f"(triggers: {[kind.name for kind in trigger_kinds]})",
            extra={"node_id": node.id, "fallback_id": fallback.id},
        )
        return fallback.id


def _trigger_kinds(triggers: FallbackTrigger) -> list[ErrorKind]:
    return [kind for trigger, kind in TRIGGER_ERROR_KINDS.items() if trigger in triggers]
