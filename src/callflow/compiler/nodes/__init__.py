"""Step factories module."""

from callflow.compiler.nodes.action import (
    GetMetricsStepFactory,
    InvokeStepFactory,
    SetAttributesStepFactory,
)
from callflow.compiler.nodes.base import CompileSteps, StepFactory
from callflow.compiler.nodes.branch import (
    CheckAttributeStepFactory,
    CheckHoursStepFactory,
    CheckStaffingStepFactory,
    SplitPercentStepFactory,
)
from callflow.compiler.nodes.collect import CollectStepFactory, SequentialInputStepFactory
from callflow.compiler.nodes.control import ContinueStepFactory, JumpToStepFactory, LoopStepFactory
from callflow.compiler.nodes.message import (
    HoldStepFactory,
    MessageStepFactory,
    StoreInputStepFactory,
)
from callflow.compiler.nodes.transfer import (
    DisconnectStepFactory,
    EndStepFactory,
    TransferToExternalStepFactory,
    TransferToFlowStepFactory,
    TransferToQueueStepFactory,
)

__all__ = [
    "CompileSteps",
    "StepFactory",
    "CheckAttributeStepFactory",
    "CheckHoursStepFactory",
    "CheckStaffingStepFactory",
    "CollectStepFactory",
    "ContinueStepFactory",
    "DisconnectStepFactory",
    "EndStepFactory",
    "GetMetricsStepFactory",
    "HoldStepFactory",
    "InvokeStepFactory",
    "JumpToStepFactory",
    "LoopStepFactory",
    "MessageStepFactory",
    "SequentialInputStepFactory",
    "SetAttributesStepFactory",
    "SplitPercentStepFactory",
    "StoreInputStepFactory",
    "TransferToExternalStepFactory",
    "TransferToFlowStepFactory",
    "TransferToQueueStepFactory",
]
