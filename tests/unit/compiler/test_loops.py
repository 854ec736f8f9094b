"""Unit tests for retry loop expansion"""

from callflow.compiler.builder import FlowBuilder
from callflow.compiler.loops import RETRY_EXIT_ATTRIBUTE, LoopExpander
from callflow.core.types import CONTINUE_LOOPING, DONE_LOOPING, ActionKind, ErrorKind


def retrying_menu(**kwargs) -> FlowBuilder:
    flow = FlowBuilder("Retry")
    (
        flow.collect_input("Press 1 for sales.", **kwargs)
        .on_digit("1", lambda b: b.transfer_to_queue("Sales"))
        .on_timeout(lambda b: b.disconnect())
        .on_error(lambda b: b.end_execution())
    )
    return flow


class TestLoopExpander:
    def test_synthesizes_loop_with_retry_prompt(self):
        """
        GIVEN an input allowing 3 attempts with a retry prompt
        WHEN expanding
        THEN the timeout edge enters a Loop with LoopCount 2 whose
        ContinueLooping plays the prompt and re-enters the input
        """
        # Arrange
        graph = retrying_menu(max_attempts=3, retry_prompt="Sorry, I didn't get that.").graph

        # Act
        created = LoopExpander().expand(graph)

        # Assert
        assert created == ["collect_input_retry"]
        loop = graph.get("collect_input_retry")
        assert loop.kind == ActionKind.LOOP
        assert loop.parameters == {"LoopCount": "2"}
        continue_edge, done_edge = loop.transitions.conditions
        assert continue_edge.condition.operands == (CONTINUE_LOOPING,)
        assert continue_edge.target == "collect_input_retry_prompt"
        assert done_edge.condition.operands == (DONE_LOOPING,)
        assert done_edge.target == "disconnect"

        prompt = graph.get("collect_input_retry_prompt")
        assert prompt.parameters == {"Text": "Sorry, I didn't get that."}
        assert prompt.transitions.next == "collect_input"

        node = graph.get("collect_input")
        assert node.transitions.error_target(ErrorKind.TIMEOUT) == "collect_input_retry"

    def test_without_retry_prompt_loop_reenters_node(self):
        graph = retrying_menu(max_attempts=2).graph

        LoopExpander().expand(graph)

        loop = graph.get("collect_input_retry")
        assert loop.parameters == {"LoopCount": "1"}
        assert loop.transitions.conditions[0].target == "collect_input"
        assert "collect_input_retry_prompt" not in graph

    def test_non_retryable_errors_are_untouched(self):
        graph = retrying_menu(max_attempts=3).graph

        LoopExpander().expand(graph)

        assert graph.get("collect_input").transitions.error_target(ErrorKind.ERROR) == "end"

    def test_single_attempt_is_not_expanded(self):
        graph = retrying_menu().graph

        assert LoopExpander().expand(graph) == []
        assert len(graph) == 4

    def test_distinct_handlers_share_one_loop(self):
        """
        GIVEN timeout and no-match handlers leading to different nodes
        WHEN expanding
        THEN both errors record their kind and enter the same loop, whose
        DoneLooping dispatches on the recorded kind
        """
        # Arrange
        flow = FlowBuilder("Handlers")
        (
            flow.collect_input("Press 1", max_attempts=3)
            .on_digit("1", lambda b: b.transfer_to_queue("Sales"))
            .on_timeout(lambda b: b.disconnect())
            .on_no_match(lambda b: b.play_prompt("Invalid").disconnect())
        )
        graph = flow.graph

        # Act
        created = LoopExpander().expand(graph)

        # Assert
        assert created == ["collect_input_retry"]
        node = graph.get("collect_input")
        assert node.transitions.error_target(ErrorKind.TIMEOUT) == "collect_input_failed_timeout"
        assert node.transitions.error_target(ErrorKind.NO_MATCH) == (
            "collect_input_failed_no_match"
        )

        marker = graph.get("collect_input_failed_no_match")
        assert marker.kind == ActionKind.SET_ATTRIBUTES
        assert marker.parameters == {"Attributes": {RETRY_EXIT_ATTRIBUTE: "no_match"}}
        assert marker.transitions.next == "collect_input_retry"
        assert graph.get("collect_input_failed_timeout").transitions.next == (
            "collect_input_retry"
        )

        loop = graph.get("collect_input_retry")
        assert loop.transitions.conditions[1].target == "collect_input_retry_exit"
        dispatch = graph.get("collect_input_retry_exit")
        assert dispatch.kind == ActionKind.CHECK_ATTRIBUTE
        assert [(e.condition.operands, e.target) for e in dispatch.transitions.conditions] == [
            (("timeout",), "disconnect"),
            (("no_match",), "message"),
        ]

    def test_shared_handler_shares_one_loop(self):
        flow = FlowBuilder("Shared")
        (
            flow.collect_input("Press 1", max_attempts=3)
            .on_digit("1", lambda b: b.transfer_to_queue("Sales"))
            .on_timeout(lambda b: b.then_continue())
            .on_no_match(lambda b: b.then_continue())
        )
        flow.disconnect()

        created = LoopExpander().expand(flow.graph)

        node = flow.graph.get("collect_input")
        assert created == ["collect_input_retry"]
        assert node.transitions.error_target(ErrorKind.TIMEOUT) == "collect_input_retry"
        assert node.transitions.error_target(ErrorKind.NO_MATCH) == "collect_input_retry"
        assert flow.graph.get("collect_input_retry").transitions.conditions[1].target == (
            "disconnect"
        )

    def test_retry_without_retryable_handlers_is_skipped(self):
        flow = FlowBuilder("Bare")
        flow.collect_input("Press 1", max_attempts=3).on_digit(
            "1", lambda b: b.transfer_to_queue("Sales")
        )

        assert LoopExpander().expand(flow.graph) == []
