"""Sealed mutation handle for the logged-in user."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, NoReturn

from pyhotaru.exceptions import HotaruStaleUserError
from pyhotaru.models.changelog import ChangeKind, UserChange

if TYPE_CHECKING:
    from pyhotaru.session import Session


class HotaruUser:
    """Read/write view of the current user's fields.

    Obtained from :meth:`HotaruClient.current_user`. Every write updates
    the local snapshot and records a :class:`UserChange` in the pending
    changelog, which :meth:`HotaruClient.synchronize_user` later sends to
    the server. Reads are local and include unconfirmed edits.

    Instances are sealed: no attribute can be added or rebound, and
    values handed out by :meth:`get` and :meth:`fields` are copies, so the
    snapshot cannot be changed behind the changelog's back.
    """

    __slots__ = ("_live",)

    def __init__(self, session: Session) -> None:
        def _live() -> Session:
            if not session.active:
                raise HotaruStaleUserError("This user handle belongs to a session that has ended")
            return session

        object.__setattr__(self, "_live", _live)

    def __setattr__(self, name: str, value: Any) -> NoReturn:
        raise AttributeError(f"{type(self).__name__} is sealed; use set() to change user fields")

    def __delattr__(self, name: str) -> NoReturn:
        raise AttributeError(f"{type(self).__name__} is sealed")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(fields={sorted(self._live().user_data)!r})"

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, field: str, default: Any = None) -> Any:
        return copy.deepcopy(self._live().user_data.get(field, default))

    def fields(self) -> dict[str, Any]:
        """Copy of every field, including pending local edits."""
        return copy.deepcopy(self._live().user_data)

    def __contains__(self, field: object) -> bool:
        return field in self._live().user_data

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set(self, field: str, value: Any) -> None:
        session = self._live()
        session.user_data[field] = copy.deepcopy(value)
        session.changelog.append(UserChange.create(ChangeKind.SET, field, copy.deepcopy(value)))

    def increment(self, field: str, amount: int | float = 1) -> None:
        """Add *amount* to a numeric field; a missing field counts as ``0``."""
        session = self._live()
        current = session.user_data.get(field, 0)
        if isinstance(current, bool) or not isinstance(current, (int, float)):
            raise TypeError(f"Cannot increment non-numeric field {field!r}")
        session.user_data[field] = current + amount
        session.changelog.append(UserChange.create(ChangeKind.INCREMENT, field, amount))

    def append(self, field: str, value: Any) -> None:
        """Append *value* to a list field; a missing field counts as ``[]``."""
        session = self._live()
        current = session.user_data.get(field, [])
        if not isinstance(current, list):
            raise TypeError(f"Cannot append to non-list field {field!r}")
        session.user_data[field] = [*current, copy.deepcopy(value)]
        session.changelog.append(UserChange.create(ChangeKind.APPEND, field, copy.deepcopy(value)))

    def append_change(self, change: UserChange) -> None:
        """Queue a prepared change without touching the local snapshot."""
        self._live().changelog.append(change)
