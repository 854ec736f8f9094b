"""Deterministic node identifier allocation."""

import re

from callflow.core.errors import BuilderUsageError

_NON_SLUG = re.compile(r"[^a-z0-9]+")
MAX_BASE_LENGTH = 48


def slugify(hint: str) -> str:
    """Turn a free-text hint into an identifier base ("Main Menu!" -> "main_menu")."""
    slug = _NON_SLUG.sub("_", hint.lower()).strip("_")
    return slug[:MAX_BASE_LENGTH].rstrip("_")


class IdentifierAllocator:
    """Allocates node identifiers unique within one graph.

    The first allocation of a hint returns the slug itself, later ones get a
    numeric suffix (`menu`, `menu_2`, `menu_3`). The same sequence of calls
    always yields the same identifiers, which keeps compiled flows stable for
    snapshot tests.
    """

    def __init__(self) -> None:
        self._used: set[str] = set()
        self._counters: dict[str, int] = {}

    def allocate(self, hint: str, default: str = "action") -> str:
        """Allocate a fresh identifier derived from `hint`."""
        base = slugify(hint) or slugify(default) or "action"
        count = self._counters.get(base, 0)
        candidate = base if count == 0 else f"{base}_{count + 1}"
        while candidate in self._used:
            count += 1
            candidate = f"{base}_{count + 1}"
        self._counters[base] = count + 1
        self._used.add(candidate)
        return candidate

    def reserve(self, node_id: str) -> str:
        """Claim an explicit identifier chosen by the flow author.

        Raises:
            BuilderUsageError: If the identifier is empty or already taken
        """
        if not node_id or not node_id.strip():
            raise BuilderUsageError("Explicit node id cannot be empty")
        if node_id in self._used:
            raise BuilderUsageError(f"Duplicate node id '{node_id}'")
        self._used.add(node_id)
        return node_id

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._used

    def __len__(self) -> int:
        return len(self._used)
