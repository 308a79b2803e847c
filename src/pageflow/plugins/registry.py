from __future__ import annotations

from typing import Dict, Generic, List, TypeVar


T = TypeVar("T")


class PluginRegistry(Generic[T]):
    """Named factories, one per name."""

    def __init__(self, kind: str = "Plugin") -> None:
        self.kind = kind
        self._factories: Dict[str, T] = {}

    def register(self, name: str, factory: T) -> None:
        if name in self._factories:
            raise ValueError(f"{self.kind} '{name}' is already registered.")
        self._factories[name] = factory

    def get(self, name: str) -> T:
        try:
            return self._factories[name]
        except KeyError as exc:
            raise KeyError(f"{self.kind} '{name}' is not registered.") from exc

    def names(self) -> List[str]:
        return sorted(self._factories.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._factories
