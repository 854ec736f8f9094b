"""Configuration models for YAML flow definitions.

A definition file declares compiler settings, the addresses of provisioned
resources and any number of flows. Each flow is an ordered list of steps;
branching steps nest further step lists, and a trailing `continue` step
rejoins the enclosing flow.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from callflow.compiler.specs import FallbackInput, PrimaryInput
from callflow.config.settings import CompilerSettings
from callflow.core.types import FallbackTrigger, InputMode

# DSL Version constants
SUPPORTED_VERSIONS = frozenset({"1.0"})
CURRENT_VERSION = "1.0"


class BaseStepConfig(BaseModel):
    """Fields shared by every step type."""

    model_config = ConfigDict(extra="forbid")

    id: str | None = Field(default=None, description="Explicit action identifier")
    label: str | None = Field(default=None, description="Hint for identifier allocation")


class ActionStepConfig(BaseStepConfig):
    """A step that appends an action; `errors` maps error kinds to handler steps."""

    errors: dict[str, list["StepConfig"]] = Field(
        default_factory=dict,
        description="Error handlers keyed by error kind (e.g. error, queue_at_capacity)",
    )


class MessageStepConfig(ActionStepConfig):
    type: Literal["message"] = "message"
    text: str | None = None
    ssml: str | None = None

    @model_validator(mode="after")
    def _one_body(self) -> "MessageStepConfig":
        if (self.text is None) == (self.ssml is None):
            raise ValueError("message step needs exactly one of 'text' or 'ssml'")
        return self


class InputCaseConfig(BaseModel):
    """One result branch matched by digits, intent, or both."""

    model_config = ConfigDict(extra="forbid")

    digits: str | None = None
    intent: str | None = None
    steps: list["StepConfig"] = Field(min_length=1)

    @field_validator("digits", mode="before")
    @classmethod
    def _digits_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int) else value


class InputHandlersConfig(ActionStepConfig):
    """Result and error branches of an input-collecting step."""

    digits: dict[str, list["StepConfig"]] = Field(default_factory=dict)
    intents: dict[str, list["StepConfig"]] = Field(default_factory=dict)
    inputs: list[InputCaseConfig] = Field(default_factory=list)
    on_timeout: list["StepConfig"] | None = None
    on_no_match: list["StepConfig"] | None = None
    on_invalid_input: list["StepConfig"] | None = None
    on_low_confidence: list["StepConfig"] | None = None
    on_error: list["StepConfig"] | None = None

    @field_validator("digits", mode="before")
    @classmethod
    def _digit_keys_as_text(cls, value: Any) -> Any:
        # YAML reads `1:` as an integer key
        if isinstance(value, dict):
            return {str(key): steps for key, steps in value.items()}
        return value


class CollectStepConfig(InputHandlersConfig):
    type: Literal["collect"] = "collect"
    prompt: str
    mode: InputMode = InputMode.DTMF
    max_digits: int = Field(default=1, ge=1)
    timeout_seconds: int = Field(default=5, ge=1)
    lex_bot: str | None = None
    max_attempts: int = Field(default=1, ge=1)
    retry_prompt: str | None = None


class SequentialInputStepConfig(InputHandlersConfig):
    type: Literal["sequential_input"] = "sequential_input"
    primary: PrimaryInput
    fallback: FallbackInput | None = None
    fallback_triggers: list[str] = Field(default_factory=lambda: ["timeout", "no_match"])
    enable_fallback: bool = True

    @field_validator("fallback_triggers")
    @classmethod
    def _known_triggers(cls, value: list[str]) -> list[str]:
        FallbackTrigger.from_names(value)
        return value


class StoreInputStepConfig(ActionStepConfig):
    type: Literal["store_input"] = "store_input"
    prompt: str
    max_digits: int = Field(default=20, ge=1)
    timeout_seconds: int = Field(default=5, ge=1)
    encrypt: bool = False


class InvokeStepConfig(ActionStepConfig):
    type: Literal["invoke"] = "invoke"
    function: str = Field(description="Name of a registered external function")
    parameters: dict[str, Any] = Field(default_factory=dict)
    timeout_seconds: int = Field(default=8, ge=1, le=8)
    response_validation: Literal["STRING_MAP", "JSON"] = "STRING_MAP"


class SetAttributesStepConfig(ActionStepConfig):
    type: Literal["set_attributes"] = "set_attributes"
    attributes: dict[str, Any] = Field(
        min_length=1, description="Values may use placeholders such as {{Queue:Sales}}"
    )


class AttributeCaseConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    operator: str = "Equals"
    value: str
    steps: list["StepConfig"] = Field(min_length=1)

    @field_validator("value", mode="before")
    @classmethod
    def _value_as_text(cls, value: Any) -> Any:
        return str(value) if isinstance(value, int | float | bool) else value


class CheckAttributeStepConfig(ActionStepConfig):
    type: Literal["check_attribute"] = "check_attribute"
    attribute: str
    namespace: str = "Attributes"
    cases: list[AttributeCaseConfig] = Field(default_factory=list)
    otherwise: list["StepConfig"] | None = None


class CheckHoursStepConfig(ActionStepConfig):
    type: Literal["check_hours"] = "check_hours"
    hours: str | None = Field(default=None, description="Hours of operation; queue's if unset")
    in_hours: list["StepConfig"] | None = None
    out_of_hours: list["StepConfig"] | None = None


class CheckStaffingStepConfig(ActionStepConfig):
    type: Literal["check_staffing"] = "check_staffing"
    queue: str | None = None
    status: Literal["Available", "Staffed", "Online"] = "Available"
    staffed: list["StepConfig"] | None = None
    not_staffed: list["StepConfig"] | None = None


class GetMetricsStepConfig(ActionStepConfig):
    type: Literal["get_metrics"] = "get_metrics"
    queue: str | None = None


class BucketConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    percent: int = Field(ge=1, le=100)
    steps: list["StepConfig"] = Field(min_length=1)


class SplitPercentStepConfig(ActionStepConfig):
    type: Literal["split_percent"] = "split_percent"
    buckets: list[BucketConfig] = Field(min_length=1)
    otherwise: list["StepConfig"] | None = None


class LoopStepConfig(ActionStepConfig):
    type: Literal["loop"] = "loop"
    times: int = Field(ge=1)
    body: list["StepConfig"] = Field(min_length=1)


class HoldStepConfig(ActionStepConfig):
    type: Literal["hold"] = "hold"
    seconds: int = Field(ge=1)


class TransferToQueueStepConfig(ActionStepConfig):
    type: Literal["transfer_to_queue"] = "transfer_to_queue"
    queue: str


class TransferToFlowStepConfig(ActionStepConfig):
    type: Literal["transfer_to_flow"] = "transfer_to_flow"
    flow: str


class TransferToExternalStepConfig(ActionStepConfig):
    type: Literal["transfer_to_external"] = "transfer_to_external"
    phone_number: str
    timeout_seconds: int = Field(default=30, ge=1)
    caller_id: str | None = None


class DisconnectStepConfig(ActionStepConfig):
    type: Literal["disconnect"] = "disconnect"


class EndStepConfig(ActionStepConfig):
    type: Literal["end"] = "end"


class ContinueStepConfig(BaseStepConfig):
    """Ends a branch and rejoins the flow after the branching step."""

    type: Literal["continue"] = "continue"


class JumpToStepConfig(BaseStepConfig):
    """Routes the flow to an action declared elsewhere by `id`."""

    type: Literal["jump_to"] = "jump_to"
    target: str


StepConfig = Annotated[
    MessageStepConfig
    | CollectStepConfig
    | SequentialInputStepConfig
    | StoreInputStepConfig
    | InvokeStepConfig
    | SetAttributesStepConfig
    | CheckAttributeStepConfig
    | CheckHoursStepConfig
    | CheckStaffingStepConfig
    | GetMetricsStepConfig
    | SplitPercentStepConfig
    | LoopStepConfig
    | HoldStepConfig
    | TransferToQueueStepConfig
    | TransferToFlowStepConfig
    | TransferToExternalStepConfig
    | DisconnectStepConfig
    | EndStepConfig
    | ContinueStepConfig
    | JumpToStepConfig,
    Field(discriminator="type"),
]


class ResourcesConfig(BaseModel):
    """Addresses of provisioned resources, keyed by the names flows use."""

    queues: dict[str, str] = Field(default_factory=dict)
    functions: dict[str, str] = Field(default_factory=dict)
    flows: dict[str, str] = Field(default_factory=dict)
    hours: dict[str, str] = Field(default_factory=dict)


class FlowConfig(BaseModel):
    """Configuration for a flow."""

    description: str = ""
    steps: list[StepConfig] = Field(default_factory=list)


class CallflowConfig(BaseModel):
    """Root configuration with DSL versioning."""

    version: str = Field(default=CURRENT_VERSION, description="DSL version")
    settings: CompilerSettings = Field(default_factory=CompilerSettings)
    resources: ResourcesConfig = Field(default_factory=ResourcesConfig)
    flows: dict[str, FlowConfig] = Field(default_factory=dict)

    @field_validator("version", mode="before")
    @classmethod
    def _supported_version(cls, value: Any) -> str:
        # YAML reads an unquoted `version: 1.0` as a float
        value = str(value)
        if value not in SUPPORTED_VERSIONS:
            raise ValueError(
                f"Unsupported DSL version: {value}. "
                f"Supported: {', '.join(sorted(SUPPORTED_VERSIONS))}"
            )
        return value


for _model in (
    ActionStepConfig,
    MessageStepConfig,
    InputCaseConfig,
    InputHandlersConfig,
    CollectStepConfig,
    SequentialInputStepConfig,
    StoreInputStepConfig,
    InvokeStepConfig,
    SetAttributesStepConfig,
    AttributeCaseConfig,
    CheckAttributeStepConfig,
    CheckHoursStepConfig,
    CheckStaffingStepConfig,
    GetMetricsStepConfig,
    BucketConfig,
    SplitPercentStepConfig,
    LoopStepConfig,
    HoldStepConfig,
    TransferToQueueStepConfig,
    TransferToFlowStepConfig,
    TransferToExternalStepConfig,
    DisconnectStepConfig,
    EndStepConfig,
    FlowConfig,
    CallflowConfig,
):
    _model.model_rebuild()
