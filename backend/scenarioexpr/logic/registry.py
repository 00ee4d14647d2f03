"""
Procedure registries.

A registry maps a predicate name to the condition that implements it. The
expression core only needs two things from one: the declared names, and
resolve(name). Conditions are plain callables; classes are instantiated on
resolution so that each predicate node gets its own condition object.
"""

from __future__ import annotations

import logging
from importlib.metadata import EntryPoint, entry_points
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, runtime_checkable

from .errors import ResolutionError

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_POINT_GROUP = "scenarioexpr.conditions"


@runtime_checkable
class Condition(Protocol):
    """A named check. Its return value becomes the predicate's result."""

    def __call__(self, *args: Any, **kwargs: Any) -> Any: ...


@runtime_checkable
class ProcedureRegistry(Protocol):
    """Lookup service from predicate name to condition."""

    def declared_names(self) -> List[str]: ...

    def resolve(self, name: str) -> Condition: ...


def _instantiate(target: Any) -> Condition:
    if isinstance(target, type):
        return target()
    if not callable(target):
        raise TypeError(f"Condition {target!r} is not callable")
    return target


class StaticRegistry:
    """
    Registry backed by an in-memory mapping.

    Example:
        registry = StaticRegistry({"always_true": lambda: True})

        @registry.condition("reached_goal")
        def reached_goal():
            return vehicle.at_goal()
    """

    def __init__(self, conditions: Optional[Dict[str, Any]] = None):
        self._conditions: Dict[str, Any] = dict(conditions or {})

    def register(self, name: str, condition: Any) -> None:
        if not name:
            raise ValueError("Condition name must not be empty")
        self._conditions[name] = condition

    def condition(self, name: str) -> Callable[[Any], Any]:
        """Decorator form of register()."""
        def decorator(target: Any) -> Any:
            self.register(name, target)
            return target
        return decorator

    def declared_names(self) -> List[str]:
        return list(self._conditions)

    def resolve(self, name: str) -> Condition:
        try:
            target = self._conditions[name]
        except KeyError:
            logger.error("Failed to load predicate %s", name)
            raise ResolutionError(name, self.declared_names()) from None
        return _instantiate(target)

    def __contains__(self, name: object) -> bool:
        return name in self._conditions

    def __len__(self) -> int:
        return len(self._conditions)


class EntryPointRegistry:
    """
    Registry that discovers conditions from installed package entry points.

    Packages declare conditions under the group (by default
    ``scenarioexpr.conditions``):

        [project.entry-points."scenarioexpr.conditions"]
        always_true = "my_checks.basic:AlwaysTrue"

    Declared names are read once per registry. Entry points are loaded on
    resolve().
    """

    def __init__(self, group: str = DEFAULT_ENTRY_POINT_GROUP):
        self.group = group
        self._declarations: Optional[Dict[str, EntryPoint]] = None

    def _discover(self) -> Iterable[EntryPoint]:
        return entry_points(group=self.group)

    @property
    def declarations(self) -> Dict[str, EntryPoint]:
        if self._declarations is None:
            self._declarations = {ep.name: ep for ep in self._discover()}
            logger.debug(
                "Discovered %d condition(s) in group %s",
                len(self._declarations), self.group,
            )
        return self._declarations

    def declared_names(self) -> List[str]:
        return list(self.declarations)

    def resolve(self, name: str) -> Condition:
        declaration = self.declarations.get(name)
        if declaration is None:
            logger.error("Failed to load predicate %s", name)
            raise ResolutionError(name, self.declared_names())
        return _instantiate(declaration.load())
