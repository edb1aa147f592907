"""pyhotaru - Async Python client for Hotaru user-data servers."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyhotaru")
except PackageNotFoundError:
    __version__ = "0+local"
from pyhotaru._transport import HttpRequestFunction, RequestFunction
from pyhotaru.client import HotaruClient
from pyhotaru.config import HotaruConfig
from pyhotaru.exceptions import (
    HotaruAlreadyInitializedError,
    HotaruApiError,
    HotaruConfigError,
    HotaruError,
    HotaruMasterKeyRequiredError,
    HotaruNonAlphanumericFunctionNameError,
    HotaruNotLoggedInError,
    HotaruRequestError,
    HotaruServerError,
    HotaruSslRequiredError,
    HotaruStaleUserError,
    HotaruStateError,
    HotaruStillLoggedInError,
    HotaruTransportError,
    HotaruUninitializedError,
)
from pyhotaru.models import ChangeKind, Changelog, HotaruUser, LogOutResult, Query, UserChange
from pyhotaru.storage import EphemeralStorage, Storage, StorageController

__all__ = [
    "__version__",
    "ChangeKind",
    "Changelog",
    "EphemeralStorage",
    "HotaruAlreadyInitializedError",
    "HotaruApiError",
    "HotaruClient",
    "HotaruConfig",
    "HotaruConfigError",
    "HotaruError",
    "HotaruMasterKeyRequiredError",
    "HotaruNonAlphanumericFunctionNameError",
    "HotaruNotLoggedInError",
    "HotaruRequestError",
    "HotaruServerError",
    "HotaruSslRequiredError",
    "HotaruStaleUserError",
    "HotaruStateError",
    "HotaruStillLoggedInError",
    "HotaruTransportError",
    "HotaruUninitializedError",
    "HotaruUser",
    "HttpRequestFunction",
    "LogOutResult",
    "Query",
    "RequestFunction",
    "Storage",
    "StorageController",
    "UserChange",
]
