"""Factories for input-collecting steps."""

from callflow.compiler.builder import FlowBuilder, InputBranches
from callflow.compiler.nodes.base import CompileSteps, expect_step, steps_handler
from callflow.compiler.specs import InputSpec
from callflow.config.models import (
    CollectStepConfig,
    InputHandlersConfig,
    SequentialInputStepConfig,
    StepConfig,
)
from callflow.core.types import FallbackTrigger


def attach_input_handlers(
    branches: InputBranches, config: InputHandlersConfig, compile_body: CompileSteps
) -> None:
    """Register the result and error branches of an input step, in YAML order."""
    for digits, steps in config.digits.items():
        branches.on_digit(digits, steps_handler(steps, compile_body))
    for intent, steps in config.intents.items():
        branches.on_intent(intent, steps_handler(steps, compile_body))
    for case in config.inputs:
        branches.on_input(
            steps_handler(case.steps, compile_body), digits=case.digits, intent=case.intent
        )
    if config.on_timeout is not None:
        branches.on_timeout(steps_handler(config.on_timeout, compile_body))
    if config.on_no_match is not None:
        branches.on_no_match(steps_handler(config.on_no_match, compile_body))
    if config.on_invalid_input is not None:
        branches.on_invalid_input(steps_handler(config.on_invalid_input, compile_body))
    if config.on_low_confidence is not None:
        branches.on_low_confidence(steps_handler(config.on_low_confidence, compile_body))
    if config.on_error is not None:
        branches.on_error(steps_handler(config.on_error, compile_body))


class CollectStepFactory:
    """Factory for single-stage collect steps."""

    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, CollectStepConfig, self)
        branches = builder.collect_input(
            config.prompt,
            max_digits=config.max_digits,
            timeout_seconds=config.timeout_seconds,
            mode=config.mode,
            lex_bot=config.lex_bot,
            max_attempts=config.max_attempts,
            retry_prompt=config.retry_prompt,
            label=config.label,
            node_id=config.id,
        )
        attach_input_handlers(branches, config, compile_body)


class SequentialInputStepFactory:
    """Factory for speech-then-keypad input steps."""

    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, SequentialInputStepConfig, self)
        spec = InputSpec(
            primary=config.primary,
            fallback=config.fallback,
            fallback_triggers=FallbackTrigger.from_names(config.fallback_triggers),
            enable_fallback=config.enable_fallback,
        )
        branches = builder.collect_sequential_input(spec, label=config.label, node_id=config.id)
        attach_input_handlers(branches, config, compile_body)
