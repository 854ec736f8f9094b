"""Factories for prompt-like steps: message, store_input and hold."""

from callflow.compiler.builder import FlowBuilder
from callflow.compiler.nodes.base import CompileSteps, expect_step
from callflow.config.models import (
    HoldStepConfig,
    MessageStepConfig,
    StepConfig,
    StoreInputStepConfig,
)


class MessageStepFactory:
    """Factory for message steps."""

    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, MessageStepConfig, self)
        builder.play_prompt(config.text, ssml=config.ssml, label=config.label, node_id=config.id)


class StoreInputStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, StoreInputStepConfig, self)
        builder.store_input(
            config.prompt,
            max_digits=config.max_digits,
            timeout_seconds=config.timeout_seconds,
            encrypt=config.encrypt,
            label=config.label,
            node_id=config.id,
        )


class HoldStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, HoldStepConfig, self)
        builder.hold(config.seconds, label=config.label, node_id=config.id)
