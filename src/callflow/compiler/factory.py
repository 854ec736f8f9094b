"""Step factory registry (OCP: extensible without modification)."""

from callflow.compiler.nodes import (
    CheckAttributeStepFactory,
    CheckHoursStepFactory,
    CheckStaffingStepFactory,
    CollectStepFactory,
    ContinueStepFactory,
    DisconnectStepFactory,
    EndStepFactory,
    GetMetricsStepFactory,
    HoldStepFactory,
    InvokeStepFactory,
    JumpToStepFactory,
    LoopStepFactory,
    MessageStepFactory,
    SequentialInputStepFactory,
    SetAttributesStepFactory,
    SplitPercentStepFactory,
    StepFactory,
    StoreInputStepFactory,
    TransferToExternalStepFactory,
    TransferToFlowStepFactory,
    TransferToQueueStepFactory,
)
from callflow.core.errors import ConfigError


class StepFactoryRegistry:
    """Registry of step factories keyed by step `type`."""

    _factories: dict[str, StepFactory] = {}

    @classmethod
    def register(cls, step_type: str, factory: StepFactory) -> None:
        """Register a new step factory."""
        cls._factories[step_type] = factory

    @classmethod
    def get(cls, step_type: str) -> StepFactory:
        """Get factory for step type."""
        factory = cls._factories.get(step_type)
        if not factory:
            raise ConfigError(
                f"Unknown step type: '{step_type}'. Available: {list(cls._factories.keys())}"
            )
        return factory

    @classmethod
    def types(cls) -> list[str]:
        return list(cls._factories.keys())


# Initialize default factories
StepFactoryRegistry.register("message", MessageStepFactory())
StepFactoryRegistry.register("collect", CollectStepFactory())
StepFactoryRegistry.register("sequential_input", SequentialInputStepFactory())
StepFactoryRegistry.register("store_input", StoreInputStepFactory())
StepFactoryRegistry.register("invoke", InvokeStepFactory())
StepFactoryRegistry.register("set_attributes", SetAttributesStepFactory())
StepFactoryRegistry.register("check_attribute", CheckAttributeStepFactory())
StepFactoryRegistry.register("check_hours", CheckHoursStepFactory())
StepFactoryRegistry.register("check_staffing", CheckStaffingStepFactory())
StepFactoryRegistry.register("get_metrics", GetMetricsStepFactory())
StepFactoryRegistry.register("split_percent", SplitPercentStepFactory())
StepFactoryRegistry.register("loop", LoopStepFactory())
StepFactoryRegistry.register("hold", HoldStepFactory())
StepFactoryRegistry.register("transfer_to_queue", TransferToQueueStepFactory())
StepFactoryRegistry.register("transfer_to_flow", TransferToFlowStepFactory())
StepFactoryRegistry.register("transfer_to_external", TransferToExternalStepFactory())
StepFactoryRegistry.register("disconnect", DisconnectStepFactory())
StepFactoryRegistry.register("end", EndStepFactory())
StepFactoryRegistry.register("continue", ContinueStepFactory())
StepFactoryRegistry.register("jump_to", JumpToStepFactory())


def get_factory_for_step(step_type: str) -> StepFactory:
    """Get the appropriate factory for a step type."""
    return StepFactoryRegistry.get(step_type)
