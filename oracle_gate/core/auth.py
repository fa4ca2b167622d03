"""
Access control for privileged gate writes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Authorizer(Protocol):
    """Decides whether an identity may perform owner-only operations."""

    def is_owner(self, identity: str) -> bool:
        ...


class OwnerAuthorizer:
    """Single-owner policy: exact identity comparison against a fixed owner."""

    def __init__(self, owner: str):
        if not owner:
            raise ValueError("owner identity is required")
        self._owner = owner

    @property
    def owner(self) -> str:
        return self._owner

    def is_owner(self, identity: str) -> bool:
        return identity == self._owner
