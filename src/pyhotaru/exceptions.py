"""Custom exception hierarchy for pyhotaru."""

from __future__ import annotations


class HotaruError(Exception):
    """Base exception for all pyhotaru errors."""


class HotaruConfigError(HotaruError):
    """Invalid or missing configuration."""


class HotaruSslRequiredError(HotaruConfigError):
    """Server URL is not ``https://`` and the SSL override is not set."""


class HotaruStateError(HotaruError):
    """Operation is not allowed in the engine's current state.

    These are local precondition violations raised before any I/O.
    Retrying will not help; fix the call site.
    """


class HotaruAlreadyInitializedError(HotaruStateError):
    """``initialize`` was called on an engine that is already initialized."""


class HotaruUninitializedError(HotaruStateError):
    """Operation called before ``initialize`` completed."""


class HotaruStillLoggedInError(HotaruStateError):
    """A login/sign-up call was made while a user is still logged in."""


class HotaruNotLoggedInError(HotaruStateError):
    """Operation requires a logged-in user."""


class HotaruStaleUserError(HotaruStateError):
    """A user handle was used after the session it was bound to ended."""


class HotaruMasterKeyRequiredError(HotaruError):
    """Elevated operation attempted without a master key."""


class HotaruNonAlphanumericFunctionNameError(HotaruError):
    """``run`` was called with a function name that is not alphanumeric."""


class HotaruTransportError(HotaruError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class HotaruApiError(HotaruError):
    """Server answered, but not with a usable ``"ok"`` result."""

    def __init__(
        self,
        message: str,
        *,
        code: int | str | None = None,
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class HotaruServerError(HotaruApiError):
    """Server-class failure (status not ``"ok"`` and ``code >= 500``)."""


class HotaruRequestError(HotaruApiError):
    """Any other non-``"ok"`` response; carries the server's message."""
