"""Configuration module for callflow."""

from callflow.config.loader import ConfigLoader
from callflow.config.models import CallflowConfig, FlowConfig, ResourcesConfig, StepConfig
from callflow.config.settings import CompilerSettings

__all__ = [
    "CallflowConfig",
    "CompilerSettings",
    "ConfigLoader",
    "FlowConfig",
    "ResourcesConfig",
    "StepConfig",
]
