"""Logged-in session state.

A :class:`Session` bundles the three things that together mean "a user is
logged in": the server-issued session id, the user snapshot and the
pending changelog. The engine holds either one ``Session`` or ``None``,
so the three can never be partially present in memory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pyhotaru.models.changelog import Changelog


@dataclass(slots=True, eq=False)
class Session:
    """Mutable state of the logged-in user.

    Parameters
    ----------
    session_id : str
        Server-issued token identifying the identity on this device.
    user_data : dict
        Last server-confirmed snapshot plus local optimistic edits.
    changelog : Changelog
        Local edits not yet confirmed by the server.
    active : bool
        Cleared when the session ends so outstanding user handles can
        detect that they are stale.
    """

    session_id: str
    user_data: dict[str, Any] = field(default_factory=dict)
    changelog: Changelog = field(default_factory=Changelog)
    active: bool = True

    def end(self) -> None:
        self.active = False
