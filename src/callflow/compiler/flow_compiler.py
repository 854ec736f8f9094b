"""Build pipeline: resolve, expand, validate and serialize one flow graph."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from callflow.compiler.dag import FlowGraph
from callflow.compiler.loops import LoopExpander
from callflow.compiler.references import ResourceReferenceRegistry
from callflow.compiler.sequential import SequentialInputCompiler
from callflow.compiler.serializer import serialize, to_json
from callflow.config.settings import CompilerSettings
from callflow.core.errors import (
    AbortingValidationError,
    UnresolvedReference,
    UnresolvedReferenceError,
)
from callflow.observability.logging import ContextLogger
from callflow.utils.hashing import fingerprint_document
from callflow.validation.findings import ValidationFinding
from callflow.validation.pipeline import ValidationPipeline

context_logger = ContextLogger(__name__)


@dataclass
class SerializedFlow:
    """Wire document of a successfully built flow."""

    name: str
    document: dict[str, Any]
    warnings: list[ValidationFinding] = field(default_factory=list)

    @property
    def fingerprint(self) -> str:
        """Content hash of the document, Metadata excluded."""
        return fingerprint_document(self.document)

    @property
    def action_count(self) -> int:
        return len(self.document["Actions"])

    def to_json(self, indent: int | None = 2) -> str:
        return to_json(self.document, indent=indent)

    def write(self, path: str | Path) -> Path:
        """Write the JSON document to `path`, or to `<path>/<name>.json` for a directory."""
        target = Path(path)
        if target.is_dir():
            target = target / f"{self.name}.json"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.to_json() + "\n", encoding="utf-8")
        return target


class FlowCompiler:
    """Compiles unresolved flow graphs into wire documents.

    One compiler can build any number of graphs. The input graph is never
    mutated: every stage runs on a deep copy, so compiling the same graph
    against the same registry always yields byte-identical JSON.

    Usage:
        compiler = FlowCompiler(registry, settings=CompilerSettings.lenient())
        flow = compiler.compile(builder.graph)
        flow.write("build/")
    """

    def __init__(
        self,
        registry: ResourceReferenceRegistry | None = None,
        settings: CompilerSettings | None = None,
        pipeline: ValidationPipeline | None = None,
    ):
        self.registry = registry if registry is not None else ResourceReferenceRegistry()
        self.settings = settings or CompilerSettings()
        self.pipeline = pipeline or ValidationPipeline.default(self.settings)
        self.sequential = SequentialInputCompiler()
        self.loops = LoopExpander()

    def prepare(self, graph: FlowGraph) -> FlowGraph:
        """Copy, resolve and expand `graph` without validating it.

        Raises:
            UnresolvedReferenceError: If referenced resources are not registered
        """
        working, unresolved = self._expand(graph)
        if unresolved:
            raise UnresolvedReferenceError(unresolved, flow_name=graph.name)
        return working

    def _expand(self, graph: FlowGraph) -> tuple[FlowGraph, list[UnresolvedReference]]:
        log = context_logger.with_context(flow_name=graph.name)
        working = graph.copy()

        unresolved = self.registry.resolve(working)
        if unresolved:
            log.error(
                f"Flow '{graph.name}' has {len(unresolved)} unresolved reference(s): "
                f"{', '.join(str(ref) for ref in unresolved)}"
            )

        fallbacks = self.sequential.expand(working)
        loops = self.loops.expand(working)
        log.debug(
            f"Expanded '{graph.name}': {len(fallbacks)} fallback input(s), "
            f"{len(loops)} retry loop(s)"
        )
        return working, unresolved

    def compile(self, graph: FlowGraph) -> SerializedFlow:
        """Build the wire document for `graph`.

        Raises:
            UnresolvedReferenceError: If referenced resources are not registered,
                with the error findings of validation alongside
            AbortingValidationError: If a prerequisite check fails
            GraphValidationError: With every error finding of the pipeline
        """
        log = context_logger.with_context(flow_name=graph.name)
        log.info(f"Compiling flow '{graph.name}' ({len(graph)} action(s))")

        working, unresolved = self._expand(graph)
        if unresolved:
            try:
                findings = self.pipeline.run(working, flow_name=graph.name).errors
            except AbortingValidationError as e:
                findings = e.findings
            raise UnresolvedReferenceError(unresolved, flow_name=graph.name, findings=findings)

        report = self.pipeline.run(working, flow_name=graph.name)
        report.raise_for_errors(graph.name)

        document = serialize(working, version=self.settings.flow_version)
        if self.settings.include_fingerprint:
            document["Metadata"]["Fingerprint"] = fingerprint_document(document)

        log.info(
            f"Compiled flow '{graph.name}' into {len(working)} action(s) "
            f"with {len(report.warnings)} warning(s)"
        )
        return SerializedFlow(name=graph.name, document=document, warnings=report.warnings)
