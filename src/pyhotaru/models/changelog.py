"""Pending user mutations and the coalescing changelog that holds them."""

from __future__ import annotations

import secrets
from collections.abc import Iterable, Iterator
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import Field

from pyhotaru.models._base import HotaruBaseModel


def fresh_id() -> str:
    """Return a new random change identifier."""
    return secrets.token_hex(12)


class ChangeKind(StrEnum):
    SET = "set"
    INCREMENT = "increment"
    APPEND = "append"


class UserChange(HotaruBaseModel):
    """One local mutation the server has not confirmed yet.

    Serialized with the server's keys: ``_id``, ``type``, ``field``,
    ``value`` and ``date``.
    """

    id: str = Field(default_factory=fresh_id, alias="_id")
    kind: ChangeKind = Field(alias="type")
    field: str
    value: Any = None
    date: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def create(cls, kind: ChangeKind, field: str, value: Any = None) -> UserChange:
        return cls(kind=kind, field=field, value=value)

    def to_wire(self) -> dict[str, Any]:
        """Plain dict for storage and requests; ``date`` stays a ``datetime``."""
        data = self.model_dump(by_alias=True)
        data["type"] = self.kind.value
        return data


class Changelog:
    """Ordered queue of pending :class:`UserChange` entries.

    Appending a ``set`` change drops every earlier pending ``set`` for the
    same field; only the latest assignment needs replaying. Other kinds
    are not idempotent and are kept as-is, in order, until the server
    reports them processed.
    """

    def __init__(self, changes: Iterable[UserChange] = ()) -> None:
        self._changes: list[UserChange] = list(changes)

    def __iter__(self) -> Iterator[UserChange]:
        return iter(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    def __repr__(self) -> str:
        return f"Changelog({self._changes!r})"

    @property
    def ids(self) -> list[str]:
        return [change.id for change in self._changes]

    def append(self, change: UserChange) -> None:
        if change.kind is ChangeKind.SET:
            self._changes = [
                c for c in self._changes if not (c.kind is ChangeKind.SET and c.field == change.field)
            ]
        self._changes.append(change)

    def prune(self, processed_ids: Iterable[str]) -> int:
        """Remove every change whose id was processed; return how many were removed."""
        processed = set(processed_ids)
        before = len(self._changes)
        self._changes = [c for c in self._changes if c.id not in processed]
        return before - len(self._changes)

    def to_wire(self) -> list[dict[str, Any]]:
        return [change.to_wire() for change in self._changes]

    @classmethod
    def from_wire(cls, items: Iterable[dict[str, Any]]) -> Changelog:
        return cls(UserChange.model_validate(item) for item in items)
