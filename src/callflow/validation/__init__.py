"""Graph validation: validators, registry and the ordered pipeline."""

from callflow.validation import validators  # noqa: F401  (registers built-ins)
from callflow.validation.base import GraphValidator
from callflow.validation.findings import ValidationFinding, ValidationReport
from callflow.validation.pipeline import ValidationPipeline
from callflow.validation.registry import ValidatorRegistry
from callflow.validation.validators import DEFAULT_ORDER

__all__ = [
    "DEFAULT_ORDER",
    "GraphValidator",
    "ValidationFinding",
    "ValidationPipeline",
    "ValidationReport",
    "ValidatorRegistry",
]
