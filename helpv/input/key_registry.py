"""Key-combo dispatch table keyed by symbolic key names."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

R = TypeVar("R")


@dataclass(frozen=True)
class KeyComboBinding(Generic[R]):
    """Mapping from one or more key names to a single handler."""

    combos: tuple[str, ...]
    handler: Callable[[], R]


class KeyComboRegistry(Generic[R]):
    """Small key-dispatch table with optional key normalization strategy."""

    def __init__(self, normalize: Callable[[str], str] | None = None) -> None:
        self._normalize = normalize if normalize is not None else self._identity
        self._handlers: dict[str, Callable[[], R]] = {}

    @staticmethod
    def _identity(key: str) -> str:
        return key

    def register_binding(self, binding: KeyComboBinding[R]) -> KeyComboRegistry[R]:
        """Register one binding; later bindings win for the same key."""
        for combo in binding.combos:
            self._handlers[self._normalize(combo)] = binding.handler
        return self

    def register_bindings(self, *bindings: KeyComboBinding[R]) -> KeyComboRegistry[R]:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def keys(self) -> Iterable[str]:
        return self._handlers.keys()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._normalize(key) in self._handlers

    def dispatch(self, key: str) -> R | None:
        """Invoke the handler bound to ``key``; ``None`` when unbound."""
        handler = self._handlers.get(self._normalize(key))
        if handler is None:
            return None
        return handler()


__all__ = ["KeyComboBinding", "KeyComboRegistry"]
