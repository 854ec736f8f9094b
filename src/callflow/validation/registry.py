"""Thread-safe registry for graph validators"""

import logging
from collections.abc import Callable
from threading import Lock

from callflow.validation.base import GraphValidator

logger = logging.getLogger(__name__)

# Global state with a lock for thread-safety
_validators: dict[str, type[GraphValidator]] = {}
_validators_lock = Lock()


class ValidatorRegistry:
    """
    Thread-safe registry of validator classes, keyed by validator id.

    All mutations are protected by a lock to ensure thread-safety
    in concurrent environments.
    """

    @classmethod
    def register(cls, name: str) -> Callable[[type[GraphValidator]], type[GraphValidator]]:
        """
        Register a validator class under `name` (also set as its id).

        Usage:
            @ValidatorRegistry.register("no-self-loops")
            class NoSelfLoops(GraphValidator):
                def check(self, graph):
                    ...

        Args:
            name: Validator id used in findings and settings

        Returns:
            Decorator function
        """

        def decorator(validator_cls: type[GraphValidator]) -> type[GraphValidator]:
            validator_cls.id = name
            with _validators_lock:
                if name in _validators:
                    logger.warning(
                        f"Validator '{name}' already registered, overwriting",
                        extra={"validator_id": name},
                    )
                _validators[name] = validator_cls
                logger.debug(
                    f"Registered validator '{name}'",
                    extra={"validator_id": name},
                )
            return validator_cls

        return decorator

    @classmethod
    def get(cls, name: str) -> type[GraphValidator]:
        """
        Get validator class by id (thread-safe read).

        Raises:
            KeyError: If validator is not registered
        """
        with _validators_lock:
            if name not in _validators:
                raise KeyError(
                    f"Validator '{name}' not registered. Available: {list(_validators.keys())}"
                )
            return _validators[name]

    @classmethod
    def create(cls, name: str, **kwargs) -> GraphValidator:
        """Instantiate a registered validator."""
        return cls.get(name)(**kwargs)

    @classmethod
    def list_validators(cls) -> list[str]:
        """List all registered validator ids (thread-safe)."""
        with _validators_lock:
            return list(_validators.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        with _validators_lock:
            return name in _validators

    @classmethod
    def unregister(cls, name: str) -> None:
        """
        Remove one validator.

        Warning: This is primarily for testing custom validators.
        """
        with _validators_lock:
            _validators.pop(name, None)
