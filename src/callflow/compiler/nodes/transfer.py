"""Factories for terminal steps."""

from callflow.compiler.builder import FlowBuilder
from callflow.compiler.nodes.base import CompileSteps, expect_step
from callflow.config.models import (
    DisconnectStepConfig,
    EndStepConfig,
    StepConfig,
    TransferToExternalStepConfig,
    TransferToFlowStepConfig,
    TransferToQueueStepConfig,
)


class TransferToQueueStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, TransferToQueueStepConfig, self)
        builder.transfer_to_queue(config.queue, label=config.label, node_id=config.id)


class TransferToFlowStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, TransferToFlowStepConfig, self)
        builder.transfer_to_flow(config.flow, label=config.label, node_id=config.id)


class TransferToExternalStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, TransferToExternalStepConfig, self)
        builder.transfer_to_external(
            config.phone_number,
            timeout_seconds=config.timeout_seconds,
            caller_id=config.caller_id,
            label=config.label,
            node_id=config.id,
        )


class DisconnectStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, DisconnectStepConfig, self)
        builder.disconnect(label=config.label, node_id=config.id)


class EndStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, EndStepConfig, self)
        builder.end_execution(label=config.label, node_id=config.id)
