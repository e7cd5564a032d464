"""Ok/Err values for operations that are allowed to fail.

A refused debit ("needs 25 gold"), a process that cannot start ("No pickaxe")
or an action whose effect fails are routine outcomes of a tick, not faults.
They come back as ``Err(reason)`` so the caller decides what to do; only
bugs raise and reach the engine's fault boundary.

    paid = store.spend(gold=25, reason="purchase")
    if paid.is_err():
        return Err(paid.error)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    @property
    def error(self) -> None:
        return None


@dataclass(frozen=True)
class Err(Generic[E]):
    """A failure carrying the reason, usually a short human-readable string."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        """Raise ValueError; check ``is_ok()`` first."""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    @property
    def value(self) -> None:
        return None


Result = Union[Ok[T], Err[E]]
