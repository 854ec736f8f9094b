"""Shared fixtures for callflow tests.

Resource addresses are fake ARNs; nothing here talks to a telephony service.
"""

import pytest

from callflow.compiler.references import ReferenceKind, ResourceReferenceRegistry
from callflow.compiler.specs import FallbackInput, InputSpec, PrimaryInput
from callflow.config.settings import CompilerSettings
from callflow.core.types import FallbackTrigger
from callflow.flows.registry import FlowCatalog

ARN_PREFIX = "arn:aws:connect:us-east-1:123456789012:instance/test"

ADDRESSES = {
    (ReferenceKind.QUEUE, "Sales"): f"{ARN_PREFIX}/queue/sales",
    (ReferenceKind.QUEUE, "Support"): f"{ARN_PREFIX}/queue/support",
    (ReferenceKind.EXTERNAL_FUNCTION, "LookupCustomer"): (
        "arn:aws:lambda:us-east-1:123456789012:function:lookup-customer"
    ),
    (ReferenceKind.FLOW, "Billing"): f"{ARN_PREFIX}/contact-flow/billing",
    (ReferenceKind.HOURS_OF_OPERATION, "MainHours"): f"{ARN_PREFIX}/operating-hours/main",
}


@pytest.fixture
def addresses() -> dict[tuple[ReferenceKind, str], str]:
    """Addresses registered by the `registry` fixture."""
    return dict(ADDRESSES)


@pytest.fixture
def registry() -> ResourceReferenceRegistry:
    """Registry with every resource the test flows reference."""
    registry = ResourceReferenceRegistry()
    for (kind, name), address in ADDRESSES.items():
        registry.register(kind, name, address)
    return registry


@pytest.fixture
def lenient_settings() -> CompilerSettings:
    return CompilerSettings.lenient()


@pytest.fixture
def speech_then_keypad() -> InputSpec:
    """Speech input falling back to a one-digit keypad entry on timeout or no match."""
    return InputSpec(
        primary=PrimaryInput(prompt="How can I help you today?", lex_bot="arn:lex:alias/main"),
        fallback=FallbackInput(prompt="Press 1 for sales or 2 for support."),
        fallback_triggers=FallbackTrigger.TIMEOUT | FallbackTrigger.NO_MATCH,
    )


@pytest.fixture
def fresh_catalog():
    """Empty default FlowCatalog, restored after the test."""
    previous = FlowCatalog._default_instance
    FlowCatalog._default_instance = FlowCatalog()
    yield FlowCatalog._default_instance
    FlowCatalog._default_instance = previous
