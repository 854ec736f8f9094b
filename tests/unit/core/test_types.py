"""Unit tests for core action, error and trigger types"""

import pytest

from callflow.core.types import (
    DEFAULT_RETRY_ON,
    TERMINAL_KINDS,
    ActionKind,
    ErrorKind,
    FallbackTrigger,
)


class TestActionKind:
    def test_terminal_kinds(self):
        """
        GIVEN every action kind
        WHEN checking is_terminal
        THEN only transfers, disconnect and end are terminal
        """
        terminal = {kind for kind in ActionKind if kind.is_terminal}

        assert terminal == set(TERMINAL_KINDS)
        assert ActionKind.TRANSFER_TO_QUEUE.is_terminal
        assert not ActionKind.COLLECT_INPUT.is_terminal
        assert not ActionKind.LOOP.is_terminal

    def test_values_are_wire_types(self):
        assert ActionKind.MESSAGE.value == "MessageParticipant"
        assert ActionKind.COLLECT_INPUT.value == "GetParticipantInput"
        assert ActionKind.INVOKE_EXTERNAL.value == "InvokeLambdaFunction"
        assert ActionKind.HOLD.value == "Wait"


class TestErrorKind:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("timeout", ErrorKind.TIMEOUT),
            ("NO_MATCH", ErrorKind.NO_MATCH),
            (" queue_at_capacity ", ErrorKind.QUEUE_AT_CAPACITY),
            ("NoMatchingError", ErrorKind.ERROR),
            ("InputTimeLimitExceeded", ErrorKind.TIMEOUT),
        ],
    )
    def test_from_name_accepts_member_names_and_wire_values(self, name, expected):
        assert ErrorKind.from_name(name) == expected

    def test_from_name_rejects_unknown(self):
        with pytest.raises(ValueError, match="Unknown error kind 'busy'"):
            ErrorKind.from_name("busy")


class TestFallbackTrigger:
    def test_from_names_combines_flags(self):
        """
        GIVEN trigger names in mixed case
        WHEN combining them
        THEN the flag holds exactly those triggers
        """
        triggers = FallbackTrigger.from_names(["timeout", "No_Match"])

        assert triggers == FallbackTrigger.TIMEOUT | FallbackTrigger.NO_MATCH
        assert FallbackTrigger.ERROR not in triggers

    def test_from_names_empty_is_none(self):
        assert FallbackTrigger.from_names([]) == FallbackTrigger.NONE

    def test_from_names_rejects_unknown(self):
        with pytest.raises(ValueError, match="Unknown fallback trigger"):
            FallbackTrigger.from_names(["hangup"])


def test_default_retry_on_excludes_hard_errors():
    assert ErrorKind.TIMEOUT in DEFAULT_RETRY_ON
    assert ErrorKind.ERROR not in DEFAULT_RETRY_ON
    assert ErrorKind.QUEUE_AT_CAPACITY not in DEFAULT_RETRY_ON
