"""Typed views of the engine's server responses."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from pyhotaru.models._base import HotaruBaseModel


class UserDataResponse(HotaruBaseModel):
    """Any response that carries the authoritative user snapshot."""

    user_data: dict[str, Any]


class AuthResponse(UserDataResponse):
    """Result of ``_logInAsGuest``, ``_signUp`` and ``_logIn``."""

    session_id: str = Field(min_length=1)


class SyncResponse(UserDataResponse):
    """Result of ``_synchronizeUser``."""

    processed_changes: list[str]


class QueryResponse(HotaruBaseModel):
    """Result of ``_runQuery``."""

    query_result: list[Any] = Field(default_factory=list)


class LogOutResult(HotaruBaseModel):
    """Outcome of :meth:`HotaruClient.log_out`.

    Local state is cleared either way. ``acknowledged`` tells whether the
    server confirmed the session invalidation; when it did not,
    ``error`` holds the failure message.
    """

    acknowledged: bool
    error: str | None = None
