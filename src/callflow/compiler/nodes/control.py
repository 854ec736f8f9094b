"""Factories for control steps: loop, continue and jump_to."""

from callflow.compiler.builder import BranchBuilder, FlowBuilder
from callflow.compiler.nodes.base import CompileSteps, expect_step, steps_handler
from callflow.config.models import (
    ContinueStepConfig,
    JumpToStepConfig,
    LoopStepConfig,
    StepConfig,
)
from callflow.core.errors import ConfigError


class LoopStepFactory:
    """Factory for counted loops. The body loops back on its own."""

    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, LoopStepConfig, self)
        builder.loop(
            config.times,
            steps_handler(config.body, compile_body),
            label=config.label,
            node_id=config.id,
        )


class ContinueStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        expect_step(step, ContinueStepConfig, self)
        if not isinstance(builder, BranchBuilder):
            raise ConfigError("'continue' is only valid at the end of a branch")
        builder.then_continue()


class JumpToStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, JumpToStepConfig, self)
        builder.jump_to(config.target)
