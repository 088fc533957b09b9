"""Transactional protocol — collaborators that can join an engine rollback."""
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Transactional(Protocol):
    """State that can be captured before a transaction and restored on failure."""

    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...
