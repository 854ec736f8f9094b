"""Pending resource references and the registry that resolves them.

Flows name external resources (queues, functions, other flows, hours of
operation) before their addresses exist. The builder stores a
`PendingReference` in the node parameters; the provisioning layer registers
addresses; `ResourceReferenceRegistry.resolve` swaps them in at build time.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from threading import Lock
from typing import TYPE_CHECKING, Any

from callflow.core.errors import BuilderUsageError, UnresolvedReference

if TYPE_CHECKING:
    from callflow.compiler.dag import FlowGraph
    from callflow.config.models import ResourcesConfig

logger = logging.getLogger(__name__)

_PLACEHOLDER = re.compile(r"^\{\{(?P<kind>[A-Za-z]+):(?P<name>[^{}]+)\}\}$")


class ReferenceKind(str, Enum):
    """Kinds of externally provisioned resources."""

    QUEUE = "Queue"
    EXTERNAL_FUNCTION = "ExternalFunction"
    FLOW = "Flow"
    HOURS_OF_OPERATION = "HoursOfOperation"


@dataclass(frozen=True)
class PendingReference:
    """Named pointer to a resource whose address is not known yet."""

    kind: ReferenceKind
    name: str

    def __str__(self) -> str:
        return f"{{{{{self.kind.value}:{self.name}}}}}"

    @classmethod
    def parse(cls, text: str) -> "PendingReference | None":
        """Parse placeholder syntax (`{{Queue:Sales}}`), None if `text` is not one."""
        match = _PLACEHOLDER.match(text.strip())
        if not match:
            return None
        try:
            kind = ReferenceKind(match.group("kind"))
        except ValueError:
            return None
        return cls(kind=kind, name=match.group("name"))


class ResourceReferenceRegistry:
    """Thread-safe registry of resource addresses.

    Populate it once (provisioning), then resolve any number of graphs
    against it. Registration takes the lock; resolution only reads a
    snapshot taken under the lock.

    Usage:
        registry = ResourceReferenceRegistry()
        registry.register(ReferenceKind.QUEUE, "Sales", "arn:aws:connect:...:queue/123")
        unresolved = registry.resolve(graph)
    """

    def __init__(self) -> None:
        self._addresses: dict[tuple[ReferenceKind, str], str] = {}
        self._lock = Lock()

    @classmethod
    def from_config(cls, resources: "ResourcesConfig") -> "ResourceReferenceRegistry":
        """Build a registry from the `resources:` section of a flow definition file."""
        registry = cls()
        registry.register_many(ReferenceKind.QUEUE, resources.queues)
        registry.register_many(ReferenceKind.EXTERNAL_FUNCTION, resources.functions)
        registry.register_many(ReferenceKind.FLOW, resources.flows)
        registry.register_many(ReferenceKind.HOURS_OF_OPERATION, resources.hours)
        return registry

    def register(self, kind: ReferenceKind, name: str, address: str) -> None:
        """Record the address of a named resource.

        Raises:
            BuilderUsageError: If name or address is empty
        """
        if not name:
            raise BuilderUsageError(f"Cannot register {kind.value} with an empty name")
        if not address or not address.strip():
            raise BuilderUsageError(f"Cannot register {kind.value} '{name}' with an empty address")

        key = (kind, name)
        with self._lock:
            previous = self._addresses.get(key)
            if previous is not None and previous != address:
                logger.warning(
                    f"{kind.value} '{name}' already registered, overwriting",
                    extra={"reference_kind": kind.value, "reference_name": name},
                )
            self._addresses[key] = address
        logger.debug(
            f"Registered {kind.value} '{name}'",
            extra={"reference_kind": kind.value, "reference_name": name},
        )

    def register_many(self, kind: ReferenceKind, addresses: Mapping[str, str]) -> None:
        """Register every name -> address pair of `addresses`."""
        for name, address in addresses.items():
            self.register(kind, name, address)

    def lookup(self, kind: ReferenceKind, name: str) -> str | None:
        """Address of a resource, None if unregistered."""
        with self._lock:
            return self._addresses.get((kind, name))

    def is_registered(self, kind: ReferenceKind, name: str) -> bool:
        with self._lock:
            return (kind, name) in self._addresses

    def snapshot(self) -> dict[tuple[ReferenceKind, str], str]:
        """Copy of the current registrations."""
        with self._lock:
            return dict(self._addresses)

    def clear(self) -> None:
        """Remove every registration.

        Warning: This is primarily for testing.
        """
        with self._lock:
            count = len(self._addresses)
            self._addresses.clear()
        logger.debug(f"Cleared {count} registered resource(s)", extra={"count": count})

    def __len__(self) -> int:
        with self._lock:
            return len(self._addresses)

    def resolve(self, graph: "FlowGraph") -> list[UnresolvedReference]:
        """Replace every registered PendingReference in `graph` with its address.

        Unregistered references are left in place and reported, one entry per
        (node, reference), in node order.

        Args:
            graph: Graph to resolve in place

        Returns:
            Unresolved references, empty when resolution is complete

        Raises:
            BuilderUsageError: If the graph was already resolved
        """
        if graph.resolved:
            raise BuilderUsageError(f"Flow '{graph.name}' has already been resolved")

        addresses = self.snapshot()
        unresolved: list[UnresolvedReference] = []

        for node in graph.nodes.values():
            missing: list[UnresolvedReference] = []
            node.parameters = {
                key: _resolve_value(value, addresses, node.id, missing)
                for key, value in node.parameters.items()
            }
            for ref in missing:
                if ref not in unresolved:
                    unresolved.append(ref)

        graph.resolved = True
        logger.debug(
            f"Resolved flow '{graph.name}' ({len(unresolved)} unresolved reference(s))",
            extra={"flow_name": graph.name, "unresolved": len(unresolved)},
        )
        return unresolved


def _resolve_value(
    value: Any,
    addresses: dict[tuple[ReferenceKind, str], str],
    node_id: str,
    missing: list[UnresolvedReference],
) -> Any:
    if isinstance(value, PendingReference):
        address = addresses.get((value.kind, value.name))
        if address is None:
            missing.append(UnresolvedReference(kind=value.kind, name=value.name, node_id=node_id))
            return value
        return address
    if isinstance(value, dict):
        return {k: _resolve_value(v, addresses, node_id, missing) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_value(v, addresses, node_id, missing) for v in value]
    return value


def iter_references(value: Any):
    """Yield every PendingReference nested in a parameter value."""
    if isinstance(value, PendingReference):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_references(item)
    elif isinstance(value, list):
        for item in value:
            yield from iter_references(item)
