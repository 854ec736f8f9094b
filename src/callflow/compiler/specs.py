"""Input and retry specifications attached to input-collecting nodes.

These are compiler metadata: they are never serialized, but drive the
sequential input and loop expansion passes that run during build.
"""

from typing import Literal, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from callflow.core.types import DEFAULT_RETRY_ON, ErrorKind, FallbackTrigger, InputMode


class RetrySpec(BaseModel):
    """Retry policy of an input-collecting node.

    `max_attempts > 1` is the only thing that makes the loop expander
    rewrite the node.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=1, ge=1, description="Total attempts, first included")
    retry_prompt: str | None = Field(
        default=None, description="Message played before every retry attempt"
    )
    retry_on: frozenset[ErrorKind] = Field(
        default=DEFAULT_RETRY_ON, description="Error transitions that trigger a retry"
    )


class PrimaryInput(BaseModel):
    """First input stage, usually speech recognition."""

    model_config = ConfigDict(frozen=True)

    mode: InputMode = InputMode.ASR
    prompt: str
    lex_bot: str | None = Field(default=None, description="Bot alias used for recognition")
    confidence_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    max_digits: int = Field(default=1, ge=1, description="Keypad entry length in DTMF mode")
    max_retries: int = Field(default=1, ge=1)
    timeout_seconds: int = Field(default=5, ge=1)


class FallbackInput(BaseModel):
    """Second input stage, always keypad entry."""

    model_config = ConfigDict(frozen=True)

    mode: Literal[InputMode.DTMF] = InputMode.DTMF
    prompt: str
    max_digits: int = Field(default=1, ge=1)
    max_retries: int = Field(default=1, ge=1)
    timeout_seconds: int = Field(default=5, ge=1)


class InputSpec(BaseModel):
    """Primary plus fallback input, with the triggers that switch between them."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    primary: PrimaryInput
    fallback: FallbackInput | None = None
    fallback_triggers: FallbackTrigger = FallbackTrigger.TIMEOUT | FallbackTrigger.NO_MATCH
    enable_fallback: bool = True

    @model_validator(mode="after")
    def _check_fallback(self) -> Self:
        if self.enable_fallback:
            if self.fallback is None:
                raise ValueError("enable_fallback requires a fallback input")
            if self.primary.mode == self.fallback.mode:
                raise ValueError(
                    f"Primary and fallback inputs must use different modes "
                    f"(both are {self.primary.mode.value})"
                )
        return self
