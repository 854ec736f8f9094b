"""Settings configuration models.

Compiler-wide settings: logging, wire format version, and validation
severities.
"""

from typing import Literal

from pydantic import BaseModel, Field

from callflow.core.types import Severity

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class CompilerSettings(BaseModel):
    """Global compiler settings."""

    log_level: LogLevel = Field(
        default="WARNING", description="Level of the callflow logger when no --log-level is given"
    )
    flow_version: str = Field(default="2019-10-30", description="Wire document Version field")
    reachability_severity: Severity = Field(
        default=Severity.ERROR,
        description=(
            "Severity of unreachable actions. 'error' blocks the build (CI), "
            "'warning' only reports them (interactive authoring)"
        ),
    )
    terminal_severity: Severity = Field(
        default=Severity.ERROR,
        description="Severity of a flow with no path to a terminal action",
    )
    disabled_validators: list[str] = Field(
        default_factory=list, description="Validator ids skipped by the default pipeline"
    )
    include_fingerprint: bool = Field(
        default=False, description="Add a content fingerprint to the document Metadata"
    )

    def severity_for(self, validator_id: str) -> Severity | None:
        """Configured severity override for a validator, None to keep its default."""
        overrides = {
            "reachability": self.reachability_severity,
            "terminal-present": self.terminal_severity,
        }
        return overrides.get(validator_id)

    @classmethod
    def lenient(cls) -> "CompilerSettings":
        """Settings for interactive use: structural gaps are warnings."""
        return cls(reachability_severity=Severity.WARNING, terminal_severity=Severity.WARNING)
