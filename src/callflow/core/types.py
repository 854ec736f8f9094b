"""Core type definitions for callflow action graphs."""

from enum import Enum, Flag, auto
from typing import Any

# Value carried in node parameters: plain JSON values or a PendingReference
# (see callflow.compiler.references) until resolution replaces it.
ParameterValue = Any


class ActionKind(str, Enum):
    """Kinds of action nodes. Values are the wire `Type` strings."""

    MESSAGE = "MessageParticipant"
    COLLECT_INPUT = "GetParticipantInput"
    STORE_INPUT = "StoreUserInput"
    BRANCH = "DistributeByPercentage"
    INVOKE_EXTERNAL = "InvokeLambdaFunction"
    SET_ATTRIBUTES = "UpdateContactAttributes"
    CHECK_ATTRIBUTE = "Compare"
    CHECK_HOURS = "CheckHoursOfOperation"
    CHECK_STAFFING = "CheckMetricData"
    GET_METRICS = "GetMetricData"
    LOOP = "Loop"
    HOLD = "Wait"
    TRANSFER_TO_QUEUE = "TransferContactToQueue"
    TRANSFER_TO_FLOW = "TransferToFlow"
    TRANSFER_TO_EXTERNAL = "TransferParticipantToThirdParty"
    DISCONNECT = "DisconnectParticipant"
    END_EXECUTION = "EndFlowExecution"

    @property
    def is_terminal(self) -> bool:
        """True if no flow execution follows a node of this kind."""
        return self in TERMINAL_KINDS


TERMINAL_KINDS = frozenset(
    {
        ActionKind.DISCONNECT,
        ActionKind.END_EXECUTION,
        ActionKind.TRANSFER_TO_QUEUE,
        ActionKind.TRANSFER_TO_FLOW,
        ActionKind.TRANSFER_TO_EXTERNAL,
    }
)


class ErrorKind(str, Enum):
    """Error transitions. Values are the wire `ErrorType` strings."""

    TIMEOUT = "InputTimeLimitExceeded"
    NO_MATCH = "NoMatchingCondition"
    INVALID_INPUT = "InvalidInput"
    LOW_CONFIDENCE = "LowConfidence"
    ERROR = "NoMatchingError"
    QUEUE_AT_CAPACITY = "QueueAtCapacity"

    @classmethod
    def from_name(cls, name: str) -> "ErrorKind":
        """Look up by member name (case-insensitive, e.g. "timeout") or wire value."""
        key = name.strip()
        if key.upper() in cls.__members__:
            return cls[key.upper()]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(
                f"Unknown error kind '{name}'. Available: {[n.lower() for n in cls.__members__]}"
            ) from None


class InputMode(str, Enum):
    """How a CollectInput node gathers caller input."""

    ASR = "asr"
    DTMF = "dtmf"


class FallbackTrigger(Flag):
    """Conditions on the primary input that hand over to the fallback input."""

    NONE = 0
    TIMEOUT = auto()
    INVALID_INPUT = auto()
    NO_MATCH = auto()
    ERROR = auto()
    LOW_CONFIDENCE = auto()
    MAX_RETRIES = auto()

    @classmethod
    def from_names(cls, names: list[str]) -> "FallbackTrigger":
        """Combine trigger names (case-insensitive, e.g. ["timeout", "no_match"])."""
        result = cls.NONE
        for name in names:
            try:
                result |= cls[name.strip().upper()]
            except KeyError:
                raise ValueError(
                    f"Unknown fallback trigger '{name}'. "
                    f"Available: {[n.lower() for n in cls.__members__ if n != 'NONE']}"
                ) from None
        return result


# MAX_RETRIES has no error edge of its own: it turns on the primary retry loop.
TRIGGER_ERROR_KINDS: dict[FallbackTrigger, ErrorKind] = {
    FallbackTrigger.TIMEOUT: ErrorKind.TIMEOUT,
    FallbackTrigger.INVALID_INPUT: ErrorKind.INVALID_INPUT,
    FallbackTrigger.NO_MATCH: ErrorKind.NO_MATCH,
    FallbackTrigger.ERROR: ErrorKind.ERROR,
    FallbackTrigger.LOW_CONFIDENCE: ErrorKind.LOW_CONFIDENCE,
}

DEFAULT_RETRY_ON = frozenset(
    {
        ErrorKind.TIMEOUT,
        ErrorKind.NO_MATCH,
        ErrorKind.INVALID_INPUT,
        ErrorKind.LOW_CONFIDENCE,
    }
)


class Severity(str, Enum):
    """Severity of a validation finding."""

    ERROR = "error"
    WARNING = "warning"


# Loop node condition operands
CONTINUE_LOOPING = "ContinueLooping"
DONE_LOOPING = "DoneLooping"
