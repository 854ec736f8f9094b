"""Base class for graph validators."""

from abc import ABC, abstractmethod
from typing import ClassVar

from callflow.compiler.dag import FlowGraph
from callflow.core.types import Severity
from callflow.validation.findings import ValidationFinding


class GraphValidator(ABC):
    """A single structural check over a finished graph.

    `aborts` declares that later validators are meaningless when this one
    reports an error, so the pipeline stops there.
    """

    id: ClassVar[str] = ""
    aborts: ClassVar[bool] = False
    default_severity: ClassVar[Severity] = Severity.ERROR

    def __init__(self, severity: Severity | None = None):
        self.severity = severity or self.default_severity

    def finding(self, message: str, node_id: str | None = None) -> ValidationFinding:
        return ValidationFinding(
            validator_id=self.id, message=message, node_id=node_id, severity=self.severity
        )

    @abstractmethod
    def check(self, graph: FlowGraph) -> list[ValidationFinding]:
        """Return every finding for `graph` (empty when valid)."""
        ...

    def __repr__(self) -> str:
        flags = ", aborts" if self.aborts else ""
        return f"<{type(self).__name__} id={self.id!r} severity={self.severity.value}{flags}>"
