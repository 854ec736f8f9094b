"""End-to-end scenarios: builder to wire document to traced call path"""

import pytest

from callflow import FlowBuilder
from callflow.compiler.references import ReferenceKind
from callflow.compiler.specs import FallbackInput, InputSpec, PrimaryInput
from callflow.core.errors import (
    AbortingValidationError,
    GraphValidationError,
    UnresolvedReferenceError,
)
from callflow.core.types import ActionKind, ErrorKind
from callflow.utils import trace

pytestmark = pytest.mark.integration


def errors_of(document: dict, identifier: str) -> dict[str, str]:
    action = next(a for a in document["Actions"] if a["Identifier"] == identifier)
    return {e["ErrorType"]: e["NextAction"] for e in action["Transitions"]["Errors"]}


def support_line() -> FlowBuilder:
    """Greeting, customer lookup, then a speech menu with keypad fallback."""
    spec = InputSpec(
        primary=PrimaryInput(prompt="Sales or support?", lex_bot="arn:lex:alias/main"),
        fallback=FallbackInput(prompt="Press 1 for sales or 2 for support."),
    )
    flow = FlowBuilder("SupportLine")
    flow.play_prompt("Thanks for calling.")
    flow.invoke_external("LookupCustomer").on_error(
        "error", lambda b: b.set_attributes(customer="unknown").then_continue()
    )
    (
        flow.collect_sequential_input(spec)
        .on_input(lambda b: b.transfer_to_queue("Sales"), digits="1", intent="Sales")
        .on_input(lambda b: b.then_continue(), digits="2", intent="Support")
        .on_timeout(lambda b: b.play_prompt("Goodbye.").disconnect())
        .on_error(lambda b: b.transfer_to_flow("Billing"))
    )
    (
        flow.check_hours("MainHours")
        .in_hours(lambda b: b.transfer_to_queue("Support"))
        .out_of_hours(lambda b: b.play_prompt("We are closed.").disconnect())
    )
    return flow


class TestSupportLine:
    def test_every_node_id_is_unique_and_every_transition_lands(self, registry):
        document = support_line().build(registry).document

        identifiers = [action["Identifier"] for action in document["Actions"]]
        assert len(identifiers) == len(set(identifiers))
        for action in document["Actions"]:
            transitions = action["Transitions"]
            targets = [transitions.get("NextAction")]
            targets += [c["NextAction"] for c in transitions["Conditions"]]
            targets += [e["NextAction"] for e in transitions["Errors"]]
            assert all(t in identifiers for t in targets if t is not None)

    def test_fallback_routing(self, registry):
        """
        GIVEN fallback triggers Timeout and NoMatch
        WHEN the flow is built
        THEN the primary sends Timeout and NoMatch to the fallback and Error
        straight to the user's error handler
        """
        document = support_line().build(registry).document

        primary = errors_of(document, "sequential_input")
        assert primary == {
            ErrorKind.TIMEOUT.value: "sequential_input_dtmf",
            ErrorKind.NO_MATCH.value: "sequential_input_dtmf",
            ErrorKind.ERROR.value: "transfer_billing",
        }
        fallback = errors_of(document, "sequential_input_dtmf")
        assert fallback[ErrorKind.TIMEOUT.value] == "message_2"

    @pytest.mark.parametrize(
        "outcomes,expected_end",
        [
            (["intent:Sales"], "transfer_sales"),
            (["timeout", "digit:1"], "transfer_sales"),
            (["no_match", "2", "True"], "transfer_support"),
            (["Support", "False"], "disconnect_2"),
            (["timeout", "timeout"], "disconnect"),
            (["error"], "transfer_billing"),
        ],
    )
    def test_call_paths(self, registry, outcomes, expected_end):
        document = support_line().build(registry).document

        result = trace(document, outcomes)

        assert result.terminated
        assert result.last == expected_end
        assert result.consumed == outcomes

    def test_two_builds_are_byte_identical(self, registry):
        first = support_line().build(registry)
        second = support_line().build(registry)

        assert first.to_json() == second.to_json()


class TestRetries:
    @pytest.fixture
    def document(self, registry):
        flow = FlowBuilder("Retries")
        (
            flow.collect_input("Press 1 for sales.", max_attempts=3, retry_prompt="Sorry?")
            .on_digit("1", lambda b: b.play_prompt("Connecting.").transfer_to_queue("Sales"))
            .on_timeout(lambda b: b.play_prompt("Goodbye.").disconnect())
        )
        return flow.build(registry).document

    def test_two_timeouts_then_digit(self, document):
        result = trace(document, ["timeout", "timeout", "1"])

        assert result.last == "transfer_sales"
        assert result.count("message") == 1
        assert result.count("collect_input_retry_prompt") == 2
        assert result.count("message_2") == 0

    def test_three_timeouts_reach_failure_handler_once(self, document):
        result = trace(document, ["timeout", "timeout", "timeout"])

        assert result.last == "disconnect"
        assert result.count("message_2") == 1
        assert result.count("transfer_sales") == 0


class TestMixedRetries:
    """Timeout and no-match lead to different handlers but share one attempt budget."""

    @pytest.fixture
    def document(self, registry):
        flow = FlowBuilder("MixedRetries")
        (
            flow.collect_input("Press 1 for sales.", max_attempts=3)
            .on_digit("1", lambda b: b.transfer_to_queue("Sales"))
            .on_timeout(lambda b: b.disconnect())
            .on_no_match(lambda b: b.end_execution())
        )
        return flow.build(registry).document

    def test_third_failure_runs_its_own_handler(self, document):
        """
        GIVEN three attempts with alternating failure kinds
        WHEN the caller fails three times
        THEN the input is not offered a fourth time and the handler of the
        last failure kind runs
        """
        # Act
        result = trace(document, ["timeout", "no_match", "timeout", "no_match", "1"])

        # Assert
        assert result.count("collect_input") == 3
        assert result.consumed == ["timeout", "no_match", "timeout"]
        assert result.last == "disconnect"

    def test_last_failure_decides_the_handler(self, document):
        result = trace(document, ["timeout", "timeout", "no_match"])

        assert result.last == "end"
        assert result.count("collect_input_retry_exit") == 1

    def test_success_within_budget(self, document):
        result = trace(document, ["no_match", "timeout", "1"])

        assert result.last == "transfer_sales"
        assert result.count("collect_input_retry_exit") == 0


class TestBuildFailures:
    def test_empty_builder(self, registry):
        with pytest.raises(AbortingValidationError) as exc_info:
            FlowBuilder("Nothing").build(registry)

        assert exc_info.value.validator_id == "non-empty"

    def test_unregistered_queue(self):
        flow = FlowBuilder("Unregistered")
        flow.play_prompt("Hi").transfer_to_queue("Sales")

        with pytest.raises(UnresolvedReferenceError) as exc_info:
            flow.build()

        assert [(r.kind, r.name) for r in exc_info.value.unresolved] == [
            (ReferenceKind.QUEUE, "Sales")
        ]

    def test_unreachable_node_and_missing_terminal_reported_together(self, registry):
        """
        GIVEN a flow whose only path never terminates and that has an orphan
        WHEN building it
        THEN one GraphValidationError carries both findings
        """
        flow = FlowBuilder("Broken")
        flow.play_prompt("Start", node_id="start")
        flow.hold(5).jump_to("start")
        flow.graph.new_node(ActionKind.MESSAGE, "orphan", {"Text": "never"})

        with pytest.raises(GraphValidationError) as exc_info:
            flow.build(registry)

        assert set(exc_info.value.validator_ids) == {"reachability", "terminal-present"}
        orphan = ("reachability", "Action 'orphan' is not reachable from entry 'start'", "orphan")
        assert orphan in exc_info.value.as_triples()

    def test_unregistered_queue_and_orphan_reported_together(self):
        """
        GIVEN a flow with an unregistered queue and an orphaned action
        WHEN building against an empty registry
        THEN one UnresolvedReferenceError lists the queue and carries the
        reachability finding
        """
        flow = FlowBuilder("Incomplete")
        flow.play_prompt("Hi").transfer_to_queue("Sales")
        flow.graph.new_node(ActionKind.MESSAGE, "orphan", {"Text": "never"})

        with pytest.raises(UnresolvedReferenceError) as exc_info:
            flow.build()

        error = exc_info.value
        assert [(r.kind, r.name) for r in error.unresolved] == [(ReferenceKind.QUEUE, "Sales")]
        assert error.validator_ids == ["reachability"]
        assert error.findings[0].node_id == "orphan"
