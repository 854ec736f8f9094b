"""Unit tests for the FlowCompiler build pipeline"""

import json

import pytest

from callflow.compiler.builder import FlowBuilder
from callflow.compiler.flow_compiler import FlowCompiler, SerializedFlow
from callflow.compiler.references import PendingReference, ReferenceKind
from callflow.config.settings import CompilerSettings
from callflow.core.errors import (
    AbortingValidationError,
    GraphValidationError,
    UnresolvedReference,
    UnresolvedReferenceError,
)
from callflow.core.types import Severity


def menu_flow() -> FlowBuilder:
    flow = FlowBuilder("Menu")
    flow.play_prompt("Hi")
    (
        flow.collect_input("Press 1 for sales, 2 for support.")
        .on_digit("1", lambda b: b.transfer_to_queue("Sales"))
        .on_digit("2", lambda b: b.play_prompt("One moment.").then_continue())
    )
    flow.transfer_to_queue("Support")
    return flow


def orphan_flow() -> FlowBuilder:
    """Every branch terminates, so the appended transfer is unreachable."""
    flow = FlowBuilder("Orphan")
    (
        flow.collect_input("Press 1")
        .on_digit("1", lambda b: b.transfer_to_queue("Sales"))
        .on_timeout(lambda b: b.disconnect())
    )
    flow.transfer_to_queue("Support")
    return flow


class TestCompile:
    def test_menu_compiles_with_resolved_addresses(self, registry, addresses):
        """
        GIVEN a menu flow and a registry holding both queues
        WHEN building it
        THEN the document starts at the greeting and carries real queue addresses
        """
        # Act
        result = menu_flow().build(registry)

        # Assert
        document = result.document
        assert document["StartAction"] == "message"
        assert result.action_count == 5
        actions = {action["Identifier"]: action for action in document["Actions"]}
        assert actions["transfer_sales"]["Parameters"]["QueueId"] == addresses[
            (ReferenceKind.QUEUE, "Sales")
        ]
        assert actions["message_2"]["Transitions"]["NextAction"] == "transfer_support"
        assert result.warnings == []

    def test_builder_graph_is_not_mutated(self, registry):
        flow = menu_flow()

        flow.build(registry)

        assert flow.graph.get("transfer_sales").parameters["QueueId"] == PendingReference(
            ReferenceKind.QUEUE, "Sales"
        )
        assert not flow.graph.resolved

    def test_build_is_deterministic(self, registry):
        first = menu_flow().build(registry)
        second = menu_flow().build(registry)
        flow = menu_flow()

        assert first.to_json() == second.to_json()
        assert flow.build(registry).to_json() == flow.build(registry).to_json()
        assert first.fingerprint == second.fingerprint

    def test_fingerprint_in_metadata(self, registry):
        settings = CompilerSettings(include_fingerprint=True)

        result = menu_flow().build(registry, settings=settings)

        assert result.document["Metadata"]["Fingerprint"] == result.fingerprint
        assert len(result.fingerprint) == 64

    def test_retry_loop_is_serialized(self, registry):
        flow = FlowBuilder("Retry")
        (
            flow.collect_input("Press 1", max_attempts=3, retry_prompt="Sorry")
            .on_digit("1", lambda b: b.transfer_to_queue("Sales"))
            .on_timeout(lambda b: b.disconnect())
        )

        result = flow.build(registry)

        actions = {action["Identifier"]: action for action in result.document["Actions"]}
        assert actions["collect_input_retry"]["Type"] == "Loop"
        assert actions["collect_input_retry"]["Parameters"] == {"LoopCount": "2"}
        assert actions["collect_input_retry_prompt"]["Transitions"]["NextAction"] == (
            "collect_input"
        )


class TestFailures:
    def test_unresolved_references_reported_with_findings(self):
        """
        GIVEN a flow referencing unregistered queues and functions
        WHEN building against an empty registry
        THEN every unresolved reference is reported in one error, together
        with the findings of validation
        """
        flow = FlowBuilder("Missing")
        flow.invoke_external("LookupCustomer").transfer_to_queue("Sales")

        with pytest.raises(UnresolvedReferenceError) as exc_info:
            flow.build()

        assert exc_info.value.unresolved == [
            UnresolvedReference(
                ReferenceKind.EXTERNAL_FUNCTION, "LookupCustomer", "invoke_lookupcustomer"
            ),
            UnresolvedReference(ReferenceKind.QUEUE, "Sales", "transfer_sales"),
        ]
        assert exc_info.value.flow_name == "Missing"
        assert exc_info.value.validator_ids == ["external-invocation"]

    def test_empty_flow_aborts(self, registry):
        with pytest.raises(AbortingValidationError) as exc_info:
            FlowBuilder("Empty").build(registry)

        assert exc_info.value.validator_id == "non-empty"

    def test_orphan_is_an_error_by_default(self, registry):
        with pytest.raises(GraphValidationError) as exc_info:
            orphan_flow().build(registry)

        assert exc_info.value.as_triples() == [
            (
                "reachability",
                "Action 'transfer_support' is not reachable from entry 'collect_input'",
                "transfer_support",
            )
        ]

    def test_orphan_is_a_warning_when_lenient(self, registry, lenient_settings):
        result = orphan_flow().build(registry, settings=lenient_settings)

        assert [w.node_id for w in result.warnings] == ["transfer_support"]
        assert result.warnings[0].severity == Severity.WARNING
        assert result.action_count == 4

    def test_every_error_reported_together(self, registry):
        """
        GIVEN a branch that continues to a point where nothing is appended
        WHEN building
        THEN the dangling branch and the missing terminal are both reported
        """
        flow = FlowBuilder("Dangling")
        flow.collect_input("Press 1").on_digit("1", lambda b: b.then_continue())

        with pytest.raises(GraphValidationError) as exc_info:
            flow.build(registry)

        assert exc_info.value.validator_ids == ["dangling-transitions", "terminal-present"]


class TestSerializedFlow:
    def test_write_to_directory(self, registry, tmp_path):
        result = menu_flow().build(registry)

        path = result.write(tmp_path)

        assert path == tmp_path / "Menu.json"
        assert json.loads(path.read_text(encoding="utf-8")) == result.document
        assert path.read_text(encoding="utf-8").endswith("}\n")

    def test_write_creates_parent_directories(self, tmp_path):
        flow = SerializedFlow(name="X", document={"Actions": []})

        path = flow.write(tmp_path / "nested" / "out.json")

        assert path.exists()
        assert flow.action_count == 0


def test_compiler_is_reusable(registry, lenient_settings):
    compiler = FlowCompiler(registry, settings=lenient_settings)

    menu = compiler.compile(menu_flow().graph)
    orphan = compiler.compile(orphan_flow().graph)

    assert menu.name == "Menu"
    assert orphan.name == "Orphan"
    assert len(orphan.warnings) == 1


def test_prepare_expands_without_validating(registry):
    flow = FlowBuilder("Prepared")
    flow.collect_input("Press 1", max_attempts=2).on_timeout(lambda b: b.disconnect())
    flow.transfer_to_queue("Support")

    graph = FlowCompiler(registry).prepare(flow.graph)

    assert "collect_input_retry" in graph
    assert graph.resolved
    assert len(flow.graph) == 3
