"""Catalog of flows defined as Python functions."""

import importlib
import logging
from collections.abc import Callable

from callflow.compiler.builder import FlowBuilder
from callflow.compiler.flow_compiler import FlowCompiler, SerializedFlow
from callflow.compiler.references import ResourceReferenceRegistry
from callflow.config.settings import CompilerSettings
from callflow.core.errors import ConfigError

logger = logging.getLogger(__name__)

# Receives a fresh builder named after the flow and appends its steps
FlowDefinition = Callable[[FlowBuilder], None]


class FlowCatalog:
    """Registry of flow definition functions.

    Flows are registered explicitly with a decorator; nothing is discovered
    by scanning. The CLI imports the modules named with `--module`, which
    registers their flows in the default catalog.

    Usage:
        catalog = FlowCatalog()

        @catalog.register("MainMenu")
        def main_menu(flow: FlowBuilder) -> None:
            flow.play_prompt("Welcome.").transfer_to_queue("Sales")

        flows = catalog.build_all(registry)
    """

    _default_instance: "FlowCatalog | None" = None

    def __init__(self) -> None:
        self._definitions: dict[str, FlowDefinition] = {}

    @classmethod
    def get_default(cls) -> "FlowCatalog":
        """Get the default global catalog instance."""
        if cls._default_instance is None:
            cls._default_instance = cls()
        return cls._default_instance

    def register_flow(self, name: str, definition: FlowDefinition) -> None:
        if not name:
            raise ConfigError("Flow name cannot be empty")
        if name in self._definitions:
            logger.warning(f"Flow '{name}' already registered, overwriting")
        self._definitions[name] = definition

    def register(self, name: str) -> Callable[[FlowDefinition], FlowDefinition]:
        """Decorator to register a flow definition under `name`."""

        def decorator(definition: FlowDefinition) -> FlowDefinition:
            self.register_flow(name, definition)
            return definition

        return decorator

    def names(self) -> list[str]:
        return list(self._definitions)

    def builder_for(self, name: str) -> FlowBuilder:
        """Run the definition of `name` on a fresh builder.

        Raises:
            ConfigError: If no flow is registered under `name`
        """
        if name not in self._definitions:
            raise ConfigError(f"Unknown flow: '{name}'. Available: {self.names()}")
        builder = FlowBuilder(name)
        self._definitions[name](builder)
        return builder

    def build(
        self,
        name: str,
        registry: ResourceReferenceRegistry | None = None,
        settings: CompilerSettings | None = None,
    ) -> SerializedFlow:
        return self.builder_for(name).build(registry, settings=settings)

    def build_all(
        self,
        registry: ResourceReferenceRegistry | None = None,
        settings: CompilerSettings | None = None,
    ) -> dict[str, SerializedFlow]:
        """Compile every registered flow with one shared compiler."""
        compiler = FlowCompiler(registry=registry, settings=settings)
        return {name: compiler.compile(self.builder_for(name).graph) for name in self.names()}

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


def flow(name: str) -> Callable[[FlowDefinition], FlowDefinition]:
    """Register a flow definition in the default catalog."""
    return FlowCatalog.get_default().register(name)


def import_flows(module: str) -> None:
    """Import a module so its `@flow` definitions register themselves.

    Raises:
        ConfigError: If the module cannot be imported
    """
    try:
        importlib.import_module(module)
    except ImportError as e:
        raise ConfigError(f"Cannot import flow module '{module}': {e}") from e
    logger.debug(f"Imported flow module '{module}'")
