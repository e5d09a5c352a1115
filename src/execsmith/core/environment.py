"""Shared execution namespace for one document run."""

from __future__ import annotations

import builtins
from collections.abc import Mapping
from typing import Any


ENVIRONMENT_NAME = "__execsmith__"


class ExecutionEnvironment:
    """Mutable namespace threaded through every fragment of a document.

    The namespace is created once per document, before traversal, and is never
    reset between fragments: a name bound by one fragment is visible to every
    later one. It must not outlive the run that created it.
    """

    def __init__(self, namespace: dict[str, Any]) -> None:
        self._namespace = namespace

    @classmethod
    def create(cls, bindings: Mapping[str, Any] | None = None) -> ExecutionEnvironment:
        """Return a fresh environment seeded with builtins and host bindings."""
        namespace: dict[str, Any] = {
            "__builtins__": builtins,
            "__name__": ENVIRONMENT_NAME,
        }
        if bindings:
            namespace.update(bindings)
        return cls(namespace)

    @property
    def namespace(self) -> dict[str, Any]:
        return self._namespace

    def get(self, name: str, default: Any = None) -> Any:
        return self._namespace.get(name, default)

    def __contains__(self, name: object) -> bool:
        return name in self._namespace

    def __repr__(self) -> str:
        names = sorted(key for key in self._namespace if not key.startswith("__"))
        return f"{type(self).__name__}({names!r})"


__all__ = ["ENVIRONMENT_NAME", "ExecutionEnvironment"]
