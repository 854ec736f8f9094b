"""Ordered validation pipeline over finished flow graphs."""

import logging
from collections.abc import Iterable

from callflow.compiler.dag import FlowGraph
from callflow.config.settings import CompilerSettings
from callflow.core.errors import AbortingValidationError, ConfigError
from callflow.core.types import Severity
from callflow.validation.base import GraphValidator
from callflow.validation.findings import ValidationFinding, ValidationReport
from callflow.validation.registry import ValidatorRegistry
from callflow.validation.validators import DEFAULT_ORDER

logger = logging.getLogger(__name__)


class ValidationPipeline:
    """Runs validators in order and collects their findings.

    Validators that declare `aborts` stop the run on their first error,
    raising AbortingValidationError with that validator's findings. All
    other findings are gathered into a single ValidationReport.
    """

    def __init__(self, validators: Iterable[GraphValidator] | None = None):
        self._validators: list[GraphValidator] = list(validators or [])
        self._disabled: set[str] = set()

    @classmethod
    def default(cls, settings: CompilerSettings | None = None) -> "ValidationPipeline":
        """Pipeline of the built-in validators, configured from settings."""
        settings = settings or CompilerSettings()
        validators = [
            ValidatorRegistry.create(name, severity=settings.severity_for(name))
            for name in DEFAULT_ORDER
        ]
        pipeline = cls(validators)
        for name in settings.disabled_validators:
            pipeline.disable(name)
        return pipeline

    @property
    def validators(self) -> list[GraphValidator]:
        """Enabled validators in run order."""
        return [v for v in self._validators if v.id not in self._disabled]

    @property
    def validator_ids(self) -> list[str]:
        return [v.id for v in self._validators]

    def get(self, validator_id: str) -> GraphValidator:
        for validator in self._validators:
            if validator.id == validator_id:
                return validator
        raise ConfigError(
            f"Validator '{validator_id}' is not in the pipeline. "
            f"Available: {self.validator_ids}"
        )

    def disable(self, validator_id: str) -> None:
        self.get(validator_id)
        self._disabled.add(validator_id)
        logger.debug(f"Disabled validator '{validator_id}'")

    def enable(self, validator_id: str) -> None:
        self.get(validator_id)
        self._disabled.discard(validator_id)

    def is_enabled(self, validator_id: str) -> bool:
        return validator_id in self.validator_ids and validator_id not in self._disabled

    def set_severity(self, validator_id: str, severity: Severity | str) -> None:
        self.get(validator_id).severity = Severity(severity)

    def reorder(self, validator_ids: list[str]) -> None:
        """Set the run order. `validator_ids` must name every validator exactly once."""
        if sorted(validator_ids) != sorted(self.validator_ids):
            raise ConfigError(
                f"Reorder must be a permutation of {self.validator_ids}, got {validator_ids}"
            )
        by_id = {v.id: v for v in self._validators}
        self._validators = [by_id[name] for name in validator_ids]

    def add(self, validator: GraphValidator, before: str | None = None) -> None:
        """Append a validator, or insert it ahead of `before`."""
        if validator.id in self.validator_ids:
            raise ConfigError(f"Validator '{validator.id}' is already in the pipeline")
        if before is None:
            self._validators.append(validator)
            return
        index = self.validator_ids.index(self.get(before).id)
        self._validators.insert(index, validator)

    def run(self, graph: FlowGraph, flow_name: str | None = None) -> ValidationReport:
        """Run every enabled validator over `graph`.

        Raises:
            AbortingValidationError: An aborting validator reported an error
        """
        flow_name = flow_name or graph.name
        findings: list[ValidationFinding] = []
        for validator in self.validators:
            found = validator.check(graph)
            if validator.aborts and any(f.severity == Severity.ERROR for f in found):
                logger.error(
                    f"Validator '{validator.id}' aborted validation of '{flow_name}'",
                    extra={"flow_name": flow_name, "validator_id": validator.id},
                )
                raise AbortingValidationError(validator.id, found, flow_name=flow_name)
            findings.extend(found)

        report = ValidationReport(findings)
        for warning in report.warnings:
            logger.warning(
                f"{flow_name}: {warning}",
                extra={"flow_name": flow_name, "validator_id": warning.validator_id},
            )
        logger.debug(
            f"Validated '{flow_name}': {len(report.errors)} error(s), "
            f"{len(report.warnings)} warning(s)"
        )
        return report

    def validate(self, graph: FlowGraph, flow_name: str | None = None) -> ValidationReport:
        """Run the pipeline and raise GraphValidationError on any error finding."""
        report = self.run(graph, flow_name)
        report.raise_for_errors(flow_name or graph.name)
        return report
