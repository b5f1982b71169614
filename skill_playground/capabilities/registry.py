from __future__ import annotations

"""Capability registry.

The registry maps a qualified capability name (``Plugin.function``) to an
invocable capability implementation.

The planner enumerates the registry to tell the completion backend which
capabilities exist, plan validation resolves every step through it, and the
executor uses it again to find the implementation to invoke.
"""

import logging
from typing import Any, Dict, Iterator, List

from ..errors import DuplicateNameError, NotFoundError
from .base import Capability, describe_capability
from .native import collect_native_functions

logger = logging.getLogger(__name__)


class CapabilityView:
    """Lazy, restartable view over the capabilities of a registry.

    Each iteration walks the registry as it is at that moment, in registration
    order. Iterating twice yields the same sequence unless capabilities were
    registered in between.
    """

    def __init__(self, caps: Dict[str, Capability]) -> None:
        self._caps = caps

    def __iter__(self) -> Iterator[Capability]:
        return iter(list(self._caps.values()))

    def __len__(self) -> int:
        return len(self._caps)


class CapabilityRegistry:
    """
    In-memory mapping of capability names to implementations.

    Notes:
        - ``register`` refuses to overwrite an existing name.
        - ``lookup`` raises ``NotFoundError`` if the capability is missing.
        - Lookup is case-insensitive and accepts a bare function name when
          exactly one plugin provides it.
    """

    def __init__(self) -> None:
        """Initialize an empty capability registry."""
        self._caps: Dict[str, Capability] = {}
        self._folded: Dict[str, str] = {}

    def register(self, cap: Capability) -> None:
        """
        Register a capability implementation.

        Args:
            cap: The capability instance to register. It must expose a ``name`` attribute.

        Raises:
            DuplicateNameError: If a capability with the same name (ignoring case) is registered.
        """
        folded = cap.name.casefold()
        if folded in self._folded:
            raise DuplicateNameError(cap.name)
        self._caps[cap.name] = cap
        self._folded[folded] = cap.name
        logger.debug(f"Registered capability '{cap.name}'")

    def import_plugin(self, plugin: Any, plugin_name: str | None = None) -> List[Capability]:
        """
        Register every ``@native_function`` method of ``plugin``.

        Args:
            plugin: Plugin instance whose decorated methods become capabilities.
            plugin_name: Name prefix; defaults to the plugin's class name.

        Returns:
            The capabilities that were registered, in declaration order.

        Raises:
            DuplicateNameError: If any function name is already registered. Nothing
                from the plugin is registered in that case.
        """
        name = plugin_name or type(plugin).__name__
        caps = collect_native_functions(plugin, name)
        for cap in caps:
            if cap.name.casefold() in self._folded:
                raise DuplicateNameError(cap.name)
        for cap in caps:
            self.register(cap)
        logger.info(f"Imported plugin '{name}' with {len(caps)} function(s)")
        return caps

    def lookup(self, name: str) -> Capability:
        """
        Retrieve a registered capability by name.

        Args:
            name: Qualified (``Plugin.function``) or bare function name.

        Returns:
            The capability implementation.

        Raises:
            NotFoundError: If no capability matches ``name``.
        """
        if name in self._caps:
            return self._caps[name]
        folded = name.casefold()
        if folded in self._folded:
            return self._caps[self._folded[folded]]
        if "." not in name:
            matches = [n for n in self._caps if n.rsplit(".", 1)[-1].casefold() == folded]
            if len(matches) == 1:
                return self._caps[matches[0]]
        raise NotFoundError(name)

    def has(self, name: str) -> bool:
        """
        Check if a capability is registered.

        Args:
            name: The capability name to check.

        Returns:
            True if ``lookup`` would succeed, False otherwise.
        """
        try:
            self.lookup(name)
        except NotFoundError:
            return False
        return True

    def list(self) -> CapabilityView:
        """Return a restartable view over all capabilities in registration order."""
        return CapabilityView(self._caps)

    def describe(self) -> str:
        """Serialize the capability list for planner prompts, one line per capability."""
        return "\n".join(f"- {describe_capability(cap)}" for cap in self.list())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        return len(self._caps)
