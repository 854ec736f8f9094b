"""Base protocol and utilities for step factories."""

from collections.abc import Callable
from typing import Any, Protocol, TypeVar

from callflow.compiler.builder import BranchBuilder, BranchHandler, FlowBuilder
from callflow.compiler.references import PendingReference
from callflow.config.models import StepConfig
from callflow.core.errors import ConfigError

# Compiles a nested step list onto a (branch) builder
CompileSteps = Callable[[FlowBuilder, list[StepConfig]], None]

StepT = TypeVar("StepT")


class StepFactory(Protocol):
    """Protocol for step type factories (OCP: Open for extension)."""

    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        """Append the actions of `step` to `builder`."""
        ...


def expect_step(step: object, step_type: type[StepT], factory: object) -> StepT:
    """Narrow `step` to the config class a factory handles."""
    if not isinstance(step, step_type):
        raise ConfigError(
            f"{type(factory).__name__} received wrong step type: {type(step).__name__}"
        )
    return step


def steps_handler(steps: list[StepConfig], compile_body: CompileSteps) -> BranchHandler:
    """Branch handler that compiles a nested step list onto the branch builder."""

    def handler(branch: BranchBuilder) -> None:
        compile_body(branch, steps)

    return handler


def with_placeholders(values: dict[str, Any]) -> dict[str, Any]:
    """Turn `{{Kind:name}}` strings into pending references, recursively."""
    return {key: _placeholder(value) for key, value in values.items()}


def _placeholder(value: Any) -> Any:
    if isinstance(value, str):
        return PendingReference.parse(value) or value
    if isinstance(value, dict):
        return with_placeholders(value)
    if isinstance(value, list):
        return [_placeholder(item) for item in value]
    return value
