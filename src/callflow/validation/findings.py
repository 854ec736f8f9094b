"""Validation findings and reports."""

from dataclasses import dataclass, field

from callflow.core.errors import GraphValidationError
from callflow.core.types import Severity


@dataclass(frozen=True)
class ValidationFinding:
    """One problem reported by a validator."""

    validator_id: str
    message: str
    node_id: str | None = None
    severity: Severity = Severity.ERROR

    def __str__(self) -> str:
        where = f" [{self.node_id}]" if self.node_id else ""
        return f"{self.validator_id}{where}: {self.message}"


@dataclass
class ValidationReport:
    """Findings of one pipeline run, in validator order."""

    findings: list[ValidationFinding] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationFinding]:
        return [f for f in self.findings if f.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[ValidationFinding]:
        return [f for f in self.findings if f.severity == Severity.WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self, flow_name: str | None = None) -> None:
        """Raise one GraphValidationError carrying every error finding."""
        if self.errors:
            raise GraphValidationError(self.errors, flow_name=flow_name)
