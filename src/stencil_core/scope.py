"""Layered, read-only variable scopes."""

from __future__ import annotations

from collections import ChainMap
from typing import Any, Mapping, Optional, Union

ScopeLike = Union["Scope", Mapping[str, Any]]


class Scope:
    """Immutable name -> string lookup built from stacked layers.

    ``derive`` never touches the receiver: it returns a new scope whose
    lookups check the added layer first and then fall back to this one, so a
    scope can be shared by any number of derived children.
    """

    __slots__ = ("_layers",)

    def __init__(self, variables: Optional[Mapping[str, Any]] = None):
        self._layers: ChainMap[str, str] = ChainMap(_freeze_layer(variables or {}))

    @classmethod
    def empty(cls) -> Scope:
        return cls()

    @classmethod
    def coerce(cls, scope: ScopeLike) -> Scope:
        """Return ``scope`` unchanged if it is a Scope, else wrap the mapping."""
        if isinstance(scope, Scope):
            return scope
        return cls(scope)

    @classmethod
    def _from_layers(cls, layers: ChainMap[str, str]) -> Scope:
        scope = cls.__new__(cls)
        scope._layers = layers
        return scope

    def lookup(self, name: str) -> Optional[str]:
        return self._layers.get(name)

    def derive(self, layer: ScopeLike) -> Scope:
        """Return a new scope with ``layer`` consulted before this one."""
        if isinstance(layer, Scope):
            return Scope._from_layers(ChainMap(*layer._layers.maps, *self._layers.maps))
        return Scope._from_layers(self._layers.new_child(_freeze_layer(layer)))

    def __contains__(self, name: object) -> bool:
        return name in self._layers

    @property
    def depth(self) -> int:
        """Number of layers, the root layer included."""
        return len(self._layers.maps)

    def __repr__(self) -> str:
        return f"Scope(names={sorted(self._layers)!r}, depth={self.depth})"


def _freeze_layer(layer: Mapping[str, Any]) -> dict[str, str]:
    # Snapshot: a published layer never reflects later caller mutations.
    return {str(key): str(value) for key, value in layer.items()}
