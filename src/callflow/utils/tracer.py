"""Walk a serialized flow document along scripted caller outcomes.

Used by tests and for debugging compiled output. Nothing is executed: the
tracer only follows `Transitions` the way the runtime would pick them.

Outcomes are consumed by branching actions only (input collection,
comparisons, hours and staffing checks, percentage splits). An outcome is
either a condition operand, optionally prefixed (`"1"`, `"digit:1"`,
`"intent:Sales"`), or an error kind by name or wire value (`"timeout"`,
`"NoMatchingCondition"`). Loop actions keep a counter per action: they
continue while the counter is within `LoopCount`, then reset it and take
`DoneLooping`.

Attributes set by `UpdateContactAttributes` actions are remembered; a
comparison on such an attribute is decided by its value and consumes no
outcome.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any

from callflow.core.errors import TraceError
from callflow.core.types import (
    CONTINUE_LOOPING,
    DONE_LOOPING,
    TERMINAL_KINDS,
    ActionKind,
    ErrorKind,
)

BRANCHING_TYPES = frozenset(
    kind.value
    for kind in (
        ActionKind.COLLECT_INPUT,
        ActionKind.CHECK_ATTRIBUTE,
        ActionKind.CHECK_HOURS,
        ActionKind.CHECK_STAFFING,
        ActionKind.BRANCH,
    )
)
TERMINAL_TYPES = frozenset(kind.value for kind in TERMINAL_KINDS)
OUTCOME_PREFIXES = ("digit:", "digits:", "intent:", "value:")
ATTRIBUTE_PATH = "$.Attributes."


@dataclass
class Trace:
    """Path taken through a document."""

    visited: list[str] = field(default_factory=list)
    consumed: list[str] = field(default_factory=list)
    # terminal | awaiting_input | dead_end | max_steps
    end: str = "terminal"

    @property
    def last(self) -> str | None:
        return self.visited[-1] if self.visited else None

    @property
    def terminated(self) -> bool:
        return self.end == "terminal"

    def count(self, identifier: str) -> int:
        """How many times `identifier` was visited."""
        return self.visited.count(identifier)


def trace(document: dict[str, Any], outcomes: list[str], max_steps: int = 200) -> Trace:
    """Follow `document` from its StartAction, consuming `outcomes` in order.

    Raises:
        TraceError: If a transition points to a missing action or an outcome
            matches no transition of the action consuming it
    """
    actions = {action["Identifier"]: action for action in document["Actions"]}
    pending = deque(outcomes)
    loop_counts: dict[str, int] = {}
    attributes: dict[str, str] = {}
    result = Trace()
    current = document["StartAction"]

    while len(result.visited) < max_steps:
        if current not in actions:
            raise TraceError(f"Transition to missing action '{current}'")
        result.visited.append(current)
        action = actions[current]
        action_type = action["Type"]
        transitions = action["Transitions"]

        if action_type in TERMINAL_TYPES:
            result.end = "terminal"
            return result

        if action_type == ActionKind.LOOP.value:
            count = loop_counts.get(current, 0) + 1
            if count <= int(action["Parameters"]["LoopCount"]):
                loop_counts[current] = count
                current = _condition_target(action, CONTINUE_LOOPING)
            else:
                loop_counts[current] = 0
                current = _condition_target(action, DONE_LOOPING)
            continue

        if action_type == ActionKind.SET_ATTRIBUTES.value:
            for key, value in action["Parameters"].get("Attributes", {}).items():
                attributes[key] = str(value)

        known = _known_attribute(action, attributes)
        if known is not None:
            current = _compare(action, known)
            continue

        if action_type in BRANCHING_TYPES:
            if not pending:
                result.end = "awaiting_input"
                return result
            outcome = pending.popleft()
            result.consumed.append(outcome)
            current = _route(action, outcome)
            continue

        next_action = transitions.get("NextAction")
        if next_action is None:
            result.end = "dead_end"
            return result
        current = next_action

    result.end = "max_steps"
    return result


def _condition_target(action: dict[str, Any], operand: str) -> str:
    for condition in action["Transitions"]["Conditions"]:
        if operand in condition["Condition"]["Operands"]:
            return condition["NextAction"]
    raise TraceError(f"Action '{action['Identifier']}' has no '{operand}' condition")


def _route(action: dict[str, Any], outcome: str) -> str:
    value = outcome
    for prefix in OUTCOME_PREFIXES:
        if outcome.startswith(prefix):
            value = outcome[len(prefix) :]
            break

    for condition in action["Transitions"]["Conditions"]:
        if value in condition["Condition"]["Operands"]:
            return condition["NextAction"]

    kind = _error_kind(outcome) if value == outcome else None
    if kind is not None:
        for error in action["Transitions"]["Errors"]:
            if error["ErrorType"] == kind.value:
                return error["NextAction"]

    raise TraceError(
        f"Outcome '{outcome}' matches no transition of action '{action['Identifier']}'"
    )


def _error_kind(outcome: str) -> ErrorKind | None:
    key = outcome.strip()
    for kind in ErrorKind:
        if key.upper() == kind.name or key == kind.value:
            return kind
    return None


def _known_attribute(action: dict[str, Any], attributes: dict[str, str]) -> str | None:
    """Value of the attribute a Compare action checks, if the trace has set it."""
    if action["Type"] != ActionKind.CHECK_ATTRIBUTE.value:
        return None
    path = action["Parameters"].get("ComparisonValue", "")
    if not path.startswith(ATTRIBUTE_PATH):
        return None
    return attributes.get(path[len(ATTRIBUTE_PATH) :])


def _compare(action: dict[str, Any], value: str) -> str:
    for condition in action["Transitions"]["Conditions"]:
        if value in condition["Condition"]["Operands"]:
            return condition["NextAction"]
    for error in action["Transitions"]["Errors"]:
        if error["ErrorType"] == ErrorKind.NO_MATCH.value:
            return error["NextAction"]
    raise TraceError(
        f"Attribute value '{value}' matches no transition of action '{action['Identifier']}'"
    )
