"""Compiler errors."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from callflow.compiler.references import ReferenceKind
    from callflow.validation.findings import ValidationFinding


class CallflowError(Exception):
    """Base class for all callflow errors."""

    pass


class BuilderUsageError(CallflowError):
    """Raised immediately when the builder API is misused."""

    pass


class ConfigError(CallflowError):
    """Raised when a flow definition or settings file is invalid."""


class CompilationError(CallflowError):
    """Build-blocking error raised by the build pipeline."""

    def __init__(self, message: str, flow_name: str | None = None):
        super().__init__(message)
        self.message = message
        self.flow_name = flow_name


@dataclass(frozen=True)
class UnresolvedReference:
    """A pending reference with no registered address."""

    kind: "ReferenceKind"
    name: str
    node_id: str

    def __str__(self) -> str:
        return f"{self.kind.value} '{self.name}' (node '{self.node_id}')"


class UnresolvedReferenceError(CompilationError):
    """Raised when one or more resource references are not registered.

    Every unresolved reference of the graph is listed in `unresolved`. The
    validation pipeline still runs over the rest of the graph; its error
    findings are carried in `findings`, so one build reports every problem.
    """

    def __init__(
        self,
        unresolved: list[UnresolvedReference],
        flow_name: str | None = None,
        findings: list["ValidationFinding"] | None = None,
    ):
        self.unresolved = list(unresolved)
        self.findings = list(findings or [])
        lines = [f"  - {ref}" for ref in self.unresolved]
        lines += [f"  - {finding}" for finding in self.findings]
        message = f"{len(self.unresolved)} unresolved resource reference(s)"
        if self.findings:
            message += f" and {len(self.findings)} validation finding(s)"
        super().__init__(message + ":\n" + "\n".join(lines), flow_name=flow_name)

    @property
    def validator_ids(self) -> list[str]:
        return list(dict.fromkeys(f.validator_id for f in self.findings))


class GraphValidationError(CompilationError):
    """Raised when the validation pipeline reports error findings.

    Carries every finding of the run, so one build surfaces every problem.
    """

    def __init__(self, findings: list["ValidationFinding"], flow_name: str | None = None):
        self.findings = list(findings)
        lines = "\n".join(f"  - {finding}" for finding in self.findings)
        prefix = f"Flow '{flow_name}' failed validation" if flow_name else "Validation failed"
        super().__init__(f"{prefix} with {len(self.findings)} finding(s):\n{lines}", flow_name)

    @property
    def validator_ids(self) -> list[str]:
        """Ids of validators that reported, in report order without duplicates."""
        return list(dict.fromkeys(f.validator_id for f in self.findings))

    def as_triples(self) -> list[tuple[str, str, str | None]]:
        """Findings as (validator_id, message, node_id) triples."""
        return [(f.validator_id, f.message, f.node_id) for f in self.findings]


class AbortingValidationError(GraphValidationError):
    """Raised when a structural prerequisite check fails and the pipeline stops."""

    def __init__(
        self,
        validator_id: str,
        findings: list["ValidationFinding"],
        flow_name: str | None = None,
    ):
        self.validator_id = validator_id
        super().__init__(findings, flow_name=flow_name)


class TraceError(CallflowError):
    """Raised when a serialized flow cannot be walked with the given outcomes."""

    pass
