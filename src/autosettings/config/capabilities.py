"""
Capability dependency graph.

Capabilities may require other capabilities. Enabling a capability on a unit
enables everything it requires, transitively. The graph must be acyclic.
"""
import logging
from typing import Dict, Iterable, List, Optional, Set

from .exceptions import (
    CapabilityCycleException,
    DuplicateDefinitionException,
    UndeclaredCapabilityException,
)
from .models import Capability

logger = logging.getLogger(__name__)


class CapabilityGraph:
    """Directed graph of capability requirements."""

    def __init__(self):
        self._capabilities: Dict[str, Capability] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._capabilities

    @property
    def names(self) -> List[str]:
        return list(self._capabilities)

    def declare(self, capability: Capability) -> None:
        if capability.name in self._capabilities:
            raise DuplicateDefinitionException(
                f"Capability '{capability.name}' already declared",
                kind='capability', name=capability.name
            )
        self._capabilities[capability.name] = capability
        logger.debug(f"Declared capability {capability.name} requires={list(capability.requires)}")

    def validate(self) -> None:
        """
        Check that every requirement edge points at a declared capability and
        that the graph has no cycles.

        Raises:
            UndeclaredCapabilityException: If a requirement names an unknown capability
            CapabilityCycleException: If requirements form a cycle
        """
        for capability in self._capabilities.values():
            for required in capability.requires:
                if required not in self._capabilities:
                    raise UndeclaredCapabilityException(
                        f"Capability '{capability.name}' requires undeclared capability '{required}'",
                        capability=required, referenced_by=capability.name
                    )

        # 0 = unvisited, 1 = on the current path, 2 = done
        state: Dict[str, int] = {}
        path: List[str] = []

        for root in self._capabilities:
            if state.get(root, 0) != 0:
                continue
            state[root] = 1
            path.append(root)
            stack = [iter(self._capabilities[root].requires)]
            while stack:
                required = next(stack[-1], None)
                if required is None:
                    stack.pop()
                    state[path.pop()] = 2
                    continue
                if state.get(required) == 1:
                    cycle = path[path.index(required):] + [required]
                    raise CapabilityCycleException(
                        f"Capability cycle detected: {' -> '.join(cycle)}", cycle=cycle
                    )
                if state.get(required, 0) == 0:
                    state[required] = 1
                    path.append(required)
                    stack.append(iter(self._capabilities[required].requires))

    def closure(self, names: Iterable[str], referenced_by: str = None) -> Set[str]:
        """
        Return the given capabilities plus everything they require, transitively.

        Args:
            names: Explicitly enabled capability names
            referenced_by: Label used in error messages for unknown names

        Returns:
            Set of enabled capability names
        """
        enabled: Set[str] = set()
        pending = list(names)
        while pending:
            name = pending.pop()
            if name in enabled:
                continue
            if name not in self._capabilities:
                raise UndeclaredCapabilityException(
                    f"Undeclared capability '{name}'",
                    capability=name, referenced_by=referenced_by
                )
            enabled.add(name)
            pending.extend(self._capabilities[name].requires)
        return enabled

    def requirer_of(self, target: str, roots: Iterable[str]) -> Optional[str]:
        """Find which of ``roots`` pulls ``target`` into the closure, if any."""
        for root in roots:
            if root == target or target in self.closure([root]):
                return root
        return None
