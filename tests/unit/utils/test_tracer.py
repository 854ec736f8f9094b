"""Unit tests for the document tracer"""

import pytest

from callflow.compiler.builder import FlowBuilder
from callflow.core.errors import TraceError
from callflow.utils import trace


@pytest.fixture
def retry_document(registry):
    flow = FlowBuilder("Retry")
    (
        flow.collect_input("Press 1 for sales.", max_attempts=3, retry_prompt="Sorry")
        .on_digit("1", lambda b: b.transfer_to_queue("Sales"))
        .on_timeout(lambda b: b.disconnect())
    )
    return flow.build(registry).document


class TestRouting:
    @pytest.mark.parametrize("outcome", ["1", "digit:1", "digits:1", "value:1"])
    def test_operand_with_or_without_prefix(self, retry_document, outcome):
        result = trace(retry_document, [outcome])

        assert result.visited == ["collect_input", "transfer_sales"]
        assert result.consumed == [outcome]
        assert result.terminated

    def test_error_kind_by_name_or_wire_value(self, retry_document):
        by_name = trace(retry_document, ["timeout", "1"])
        by_value = trace(retry_document, ["InputTimeLimitExceeded", "1"])

        assert by_name.visited == by_value.visited
        assert by_name.last == "transfer_sales"

    def test_prefixed_outcome_is_never_an_error_kind(self, retry_document):
        with pytest.raises(TraceError, match="Outcome 'value:timeout' matches no transition"):
            trace(retry_document, ["value:timeout"])

    def test_unmatched_outcome(self, retry_document):
        with pytest.raises(TraceError, match="of action 'collect_input'"):
            trace(retry_document, ["9"])


class TestRetryLoops:
    def test_retries_then_succeeds(self, retry_document):
        """
        GIVEN an input allowing 3 attempts with a retry prompt
        WHEN the caller times out twice and then presses 1
        THEN the prompt plays twice and the call reaches the sales transfer
        """
        result = trace(retry_document, ["timeout", "timeout", "1"])

        assert result.last == "transfer_sales"
        assert result.count("collect_input") == 3
        assert result.count("collect_input_retry_prompt") == 2

    def test_handler_runs_once_after_last_attempt(self, retry_document):
        result = trace(retry_document, ["timeout"] * 3)

        assert result.last == "disconnect"
        assert result.count("disconnect") == 1
        assert result.count("collect_input") == 3

    def test_counted_loop_runs_body_times(self, registry):
        flow = FlowBuilder("Counted")
        flow.loop(3, lambda b: b.play_prompt("Please hold")).disconnect()

        result = trace(flow.build(registry).document, [])

        assert result.count("message") == 3
        assert result.count("loop") == 4
        assert result.last == "disconnect"


class TestEndReasons:
    def test_awaiting_input(self, retry_document):
        result = trace(retry_document, [])

        assert result.end == "awaiting_input"
        assert result.visited == ["collect_input"]
        assert not result.terminated

    def test_max_steps(self, registry, lenient_settings):
        flow = FlowBuilder("Forever")
        flow.play_prompt("Again", node_id="again").jump_to("again")
        document = flow.build(registry, settings=lenient_settings).document

        result = trace(document, [], max_steps=5)

        assert result.end == "max_steps"
        assert result.visited == ["again"] * 5

    def test_dead_end(self):
        document = {
            "StartAction": "a",
            "Actions": [
                {"Identifier": "a", "Type": "MessageParticipant", "Transitions": {}},
            ],
        }

        assert trace(document, []).end == "dead_end"

    def test_missing_action(self):
        document = {
            "StartAction": "a",
            "Actions": [
                {
                    "Identifier": "a",
                    "Type": "MessageParticipant",
                    "Transitions": {"NextAction": "ghost"},
                },
            ],
        }

        with pytest.raises(TraceError, match="missing action 'ghost'"):
            trace(document, [])


class TestAttributes:
    @pytest.fixture
    def tier_document(self, registry):
        flow = FlowBuilder("Tier")
        flow.set_attributes(tier="gold")
        (
            flow.check_attribute("tier")
            .when_equals("gold", lambda b: b.transfer_to_queue("Sales"))
            .otherwise(lambda b: b.disconnect())
        )
        return flow.build(registry).document

    def test_comparison_on_attribute_set_along_the_path(self, tier_document):
        """
        GIVEN a comparison on an attribute the flow itself sets
        WHEN tracing without outcomes
        THEN the comparison is decided by the attribute value
        """
        # Act
        result = trace(tier_document, [])

        # Assert
        assert result.last == "transfer_sales"
        assert result.consumed == []

    def test_comparison_on_unknown_attribute_consumes_outcome(self, registry):
        flow = FlowBuilder("Unknown")
        (
            flow.check_attribute("tier")
            .when_equals("gold", lambda b: b.transfer_to_queue("Sales"))
            .otherwise(lambda b: b.disconnect())
        )
        document = flow.build(registry).document

        assert trace(document, []).end == "awaiting_input"
        assert trace(document, ["no_match"]).last == "disconnect"
