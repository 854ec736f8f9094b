"""Factories for branching checks: attribute, hours, staffing and percentage split."""

from callflow.compiler.builder import FlowBuilder
from callflow.compiler.nodes.base import CompileSteps, expect_step, steps_handler
from callflow.config.models import (
    CheckAttributeStepConfig,
    CheckHoursStepConfig,
    CheckStaffingStepConfig,
    SplitPercentStepConfig,
    StepConfig,
)


class CheckAttributeStepFactory:
    """Factory for check_attribute steps (cases in declaration order)."""

    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, CheckAttributeStepConfig, self)
        branches = builder.check_attribute(
            config.attribute, namespace=config.namespace, label=config.label, node_id=config.id
        )
        for case in config.cases:
            branches.when(case.operator, case.value, steps_handler(case.steps, compile_body))
        if config.otherwise is not None:
            branches.otherwise(steps_handler(config.otherwise, compile_body))


class CheckHoursStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, CheckHoursStepConfig, self)
        branches = builder.check_hours(config.hours, label=config.label, node_id=config.id)
        if config.in_hours is not None:
            branches.in_hours(steps_handler(config.in_hours, compile_body))
        if config.out_of_hours is not None:
            branches.out_of_hours(steps_handler(config.out_of_hours, compile_body))


class CheckStaffingStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, CheckStaffingStepConfig, self)
        branches = builder.check_staffing(
            config.queue, status=config.status, label=config.label, node_id=config.id
        )
        if config.staffed is not None:
            branches.staffed(steps_handler(config.staffed, compile_body))
        if config.not_staffed is not None:
            branches.not_staffed(steps_handler(config.not_staffed, compile_body))


class SplitPercentStepFactory:
    def apply(self, builder: FlowBuilder, step: StepConfig, compile_body: CompileSteps) -> None:
        config = expect_step(step, SplitPercentStepConfig, self)
        branches = builder.split_percent(label=config.label, node_id=config.id)
        for bucket in config.buckets:
            branches.bucket(bucket.percent, steps_handler(bucket.steps, compile_body))
        if config.otherwise is not None:
            branches.otherwise(steps_handler(config.otherwise, compile_body))
