"""Compile YAML flow definitions through the fluent builder."""

import logging

from callflow.compiler.builder import FlowBuilder
from callflow.compiler.factory import get_factory_for_step
from callflow.compiler.flow_compiler import FlowCompiler, SerializedFlow
from callflow.compiler.nodes.base import steps_handler
from callflow.compiler.references import ResourceReferenceRegistry
from callflow.config.models import ActionStepConfig, CallflowConfig, FlowConfig, StepConfig
from callflow.core.errors import BuilderUsageError, ConfigError
from callflow.core.types import ErrorKind

logger = logging.getLogger(__name__)


def compile_steps(builder: FlowBuilder, steps: list[StepConfig]) -> None:
    """Append `steps` to `builder` in order, nested branches included."""
    for index, step in enumerate(steps):
        if step.type == "continue" and index != len(steps) - 1:
            raise ConfigError("'continue' must be the last step of its branch")
        get_factory_for_step(step.type).apply(builder, step, compile_steps)
        if isinstance(step, ActionStepConfig):
            for name, handler_steps in step.errors.items():
                try:
                    kind = ErrorKind.from_name(name)
                except ValueError as e:
                    raise ConfigError(str(e)) from e
                builder.on_error(kind, steps_handler(handler_steps, compile_steps))


def build_flow(name: str, flow_config: FlowConfig) -> FlowBuilder:
    """Run a flow definition through a fresh FlowBuilder.

    Raises:
        ConfigError: If the definition misuses the builder (e.g. steps after
            a transfer, or an empty branch)
    """
    builder = FlowBuilder(name)
    try:
        compile_steps(builder, flow_config.steps)
    except (BuilderUsageError, ConfigError) as e:
        raise ConfigError(f"Flow '{name}': {e}") from e
    logger.debug(
        f"Built flow '{name}' from definition ({len(builder.graph)} action(s))",
        extra={"flow_name": name},
    )
    return builder


def registry_for(
    config: CallflowConfig, registry: ResourceReferenceRegistry | None = None
) -> ResourceReferenceRegistry:
    """Registry holding the definition's resources, plus those of `registry`."""
    merged = ResourceReferenceRegistry.from_config(config.resources)
    if registry is not None:
        for (kind, name), address in registry.snapshot().items():
            merged.register(kind, name, address)
    return merged


def compile_config(
    config: CallflowConfig,
    registry: ResourceReferenceRegistry | None = None,
    flows: list[str] | None = None,
) -> dict[str, SerializedFlow]:
    """Build and compile the flows of a definition, all of them by default.

    Stops at the first flow that fails; use `build_flow` and `FlowCompiler`
    directly to collect failures per flow.

    Raises:
        ConfigError: If a requested flow does not exist or is malformed
        CompilationError: If a flow fails resolution or validation
    """
    names = flows or list(config.flows)
    unknown = [name for name in names if name not in config.flows]
    if unknown:
        raise ConfigError(f"Unknown flow(s) {unknown}. Available: {list(config.flows)}")

    compiler = FlowCompiler(registry=registry_for(config, registry), settings=config.settings)
    return {
        name: compiler.compile(build_flow(name, config.flows[name]).graph) for name in names
    }
