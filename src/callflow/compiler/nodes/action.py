"""Factories for steps that act on the contact: invoke, set_attributes, get_metrics."""

from callflow.compiler.builder import FlowBuilder
from callflow.compiler.nodes.base import CompileSteps, expect_step, with_placeholders
from callflow.config.models import (
    GetMetricsStepConfig,
    InvokeStepConfig,
    SetAttributesStepConfig,
    StepConfig,
)


class InvokeStepFactory:
    """Factory for external function invocations.

    `function` names a registered external function; its address is filled
    in at build time from the `resources.functions` section or the registry
    passed to the compiler.
    """

    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, InvokeStepConfig, self)
        builder.invoke_external(
            config.function,
            parameters=with_placeholders(config.parameters),
            timeout_seconds=config.timeout_seconds,
            response_validation=config.response_validation,
            label=config.label,
            node_id=config.id,
        )


class SetAttributesStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, SetAttributesStepConfig, self)
        builder.set_attributes(
            with_placeholders(config.attributes), label=config.label, node_id=config.id
        )


class GetMetricsStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, GetMetricsStepConfig, self)
        builder.get_metrics(config.queue, label=config.label, node_id=config.id)
