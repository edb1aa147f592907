"""High-level async engine: session state machine, changelog sync and request dispatch."""

from __future__ import annotations

import logging
import re
from typing import Any, TypeVar

import aiohttp
from pydantic import ValidationError

from pyhotaru._constants import (
    ENDPOINT_CONVERT_GUEST_USER,
    ENDPOINT_LOG_IN,
    ENDPOINT_LOG_IN_AS_GUEST,
    ENDPOINT_LOG_OUT,
    ENDPOINT_RUN_QUERY,
    ENDPOINT_SIGN_UP,
    ENDPOINT_SYNCHRONIZE_USER,
    INSTALLATION_ID_KEY,
    SESSION_ID_KEY,
    USER_CHANGELOG_KEY,
    USER_DATA_KEY,
)
from pyhotaru._redact import redact_for_log
from pyhotaru._transport import HttpRequestFunction, RequestFunction
from pyhotaru.config import HotaruConfig
from pyhotaru.exceptions import (
    HotaruAlreadyInitializedError,
    HotaruApiError,
    HotaruError,
    HotaruMasterKeyRequiredError,
    HotaruNonAlphanumericFunctionNameError,
    HotaruNotLoggedInError,
    HotaruStillLoggedInError,
    HotaruUninitializedError,
)
from pyhotaru.models._base import HotaruBaseModel
from pyhotaru.models.changelog import Changelog, fresh_id
from pyhotaru.models.query import Query
from pyhotaru.models.responses import AuthResponse, LogOutResult, QueryResponse, SyncResponse, UserDataResponse
from pyhotaru.models.user import HotaruUser
from pyhotaru.session import Session
from pyhotaru.storage import Storage, StorageController

_logger = logging.getLogger(__name__)

M = TypeVar("M", bound=HotaruBaseModel)

_FUNCTION_NAME_RE = re.compile(r"[A-Za-z0-9]+")


class HotaruClient:
    """Async client engine for a Hotaru user-data server.

    One instance manages one logged-in identity at a time. It is not safe
    to run two of its coroutines concurrently; callers serialize calls.

    Usage::

        async with HotaruClient() as client:
            await client.initialize(HotaruConfig(server_url="https://api.example.com"))
            await client.log_in_as_guest()
            user = client.current_user()
            user.set("name", "Ada")
            await client.synchronize_user()
    """

    def __init__(self) -> None:
        self._initialized = False
        self._config: HotaruConfig | None = None
        self._server_url = ""
        self._storage: StorageController | None = None
        self._request_function: RequestFunction | None = None
        self._owned_request_function: HttpRequestFunction | None = None
        self._installation_id = ""
        self._session: Session | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> HotaruClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def initialize(
        self,
        config: HotaruConfig,
        *,
        storage: Storage | None = None,
        request_function: RequestFunction | None = None,
        http_session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Validate *config*, load persisted state and make the engine usable.

        ``storage`` defaults to an in-memory store. ``request_function``
        defaults to :class:`HttpRequestFunction`, which uses
        ``http_session`` when given and otherwise opens its own.
        """
        if self._initialized:
            raise HotaruAlreadyInitializedError("HotaruClient has already been initialized")

        server_url = config.resolve_server_url()
        controller = StorageController(storage)

        installation_id = await controller.get_primitive(INSTALLATION_ID_KEY)
        if not installation_id:
            installation_id = fresh_id()
            await controller.set_primitive(INSTALLATION_ID_KEY, installation_id)
            _logger.debug("Generated installation id")

        if request_function is None:
            self._owned_request_function = HttpRequestFunction(http_session, timeout=config.request_timeout)
            request_function = self._owned_request_function

        self._config = config
        self._server_url = server_url
        self._storage = controller
        self._request_function = request_function
        self._installation_id = str(installation_id)
        self._session = await self._load_session()
        self._initialized = True
        _logger.info(
            "Hotaru initialized server=%s logged_in=%s",
            server_url,
            self._session is not None,
        )

    async def close(self) -> None:
        """Release the default HTTP session, if the engine opened one."""
        if self._owned_request_function is not None:
            await self._owned_request_function.close()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_logged_in(self) -> bool:
        return self._session is not None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise HotaruUninitializedError("HotaruClient not initialized. Call 'await client.initialize(config)' first")

    def _require_session(self) -> Session:
        if self._session is None:
            raise HotaruNotLoggedInError("No user is logged in")
        return self._session

    def _ensure_logged_out(self) -> None:
        if self._session is not None:
            raise HotaruStillLoggedInError("A user is still logged in; log out first")

    async def _make_request(self, endpoint: str, params: dict[str, Any]) -> Any:
        """Single dispatch point: attach installation id and master key, then send."""
        assert self._config is not None and self._request_function is not None  # noqa: S101
        payload: dict[str, Any] = {
            **params,
            "installationId": self._installation_id,
            "masterKey": self._config.master_key,
        }
        _logger.debug("Dispatch %s payload=%s", endpoint, redact_for_log(payload))
        return await self._request_function(self._server_url + endpoint, payload)

    @staticmethod
    def _parse(model: type[M], result: Any, endpoint: str) -> M:
        try:
            return model.model_validate(result)
        except ValidationError as exc:
            raise HotaruApiError(
                f"Unexpected response from {endpoint}: {redact_for_log(result)}",
                code="invalid_response",
                endpoint=endpoint,
            ) from exc

    async def _load_session(self) -> Session | None:
        storage = self._ensure_storage()
        session_id = await storage.get_primitive(SESSION_ID_KEY)
        user_data = await storage.get_object(USER_DATA_KEY)
        changelog = await storage.get_object(USER_CHANGELOG_KEY)

        present = [value is not None for value in (session_id, user_data, changelog)]
        if not any(present):
            return None
        if not all(present):
            # A crash between key writes; nothing consistent to restore.
            _logger.warning("Discarding partially persisted session state")
            await self._remove_persisted_session()
            return None

        try:
            restored = Changelog.from_wire(changelog)
        except (ValidationError, TypeError) as exc:
            _logger.warning("Discarding persisted session with unreadable changelog: %s", exc)
            await self._remove_persisted_session()
            return None
        if not isinstance(user_data, dict):
            _logger.warning("Discarding persisted session with unreadable user data")
            await self._remove_persisted_session()
            return None

        return Session(
            session_id=str(session_id),
            user_data=user_data,
            changelog=restored,
        )

    def _ensure_storage(self) -> StorageController:
        if self._storage is None:
            raise HotaruUninitializedError("HotaruClient not initialized")
        return self._storage

    async def _save_user(self, session: Session) -> None:
        # Two independent writes; a crash between them leaves the keys out of step.
        storage = self._ensure_storage()
        await storage.set_object(USER_DATA_KEY, session.user_data)
        await storage.set_object(USER_CHANGELOG_KEY, session.changelog.to_wire())

    async def _save_session(self, session: Session) -> None:
        await self._ensure_storage().set_primitive(SESSION_ID_KEY, session.session_id)
        await self._save_user(session)

    async def _remove_persisted_session(self) -> None:
        storage = self._ensure_storage()
        await storage.remove_item(SESSION_ID_KEY)
        await storage.remove_item(USER_DATA_KEY)
        await storage.remove_item(USER_CHANGELOG_KEY)

    async def _clear_session(self) -> None:
        session = self._session
        self._session = None
        if session is not None:
            session.end()
        await self._remove_persisted_session()

    async def _start_session(self, endpoint: str, params: dict[str, Any]) -> None:
        self._ensure_initialized()
        self._ensure_logged_out()

        result = await self._make_request(endpoint, params)
        auth = self._parse(AuthResponse, result, endpoint)

        session = Session(session_id=auth.session_id, user_data=dict(auth.user_data))
        await self._save_session(session)
        self._session = session
        _logger.info("Logged in via %s", endpoint)

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    async def get_installation_id(self) -> str:
        """Per-device identifier sent with every request."""
        self._ensure_initialized()
        return self._installation_id

    def current_user(self) -> HotaruUser | None:
        """Return a sealed handle on the logged-in user, or ``None``."""
        self._ensure_initialized()
        if self._session is None:
            return None
        return HotaruUser(self._session)

    async def log_in_as_guest(self) -> None:
        """Create an anonymous account on the server and log into it."""
        await self._start_session(ENDPOINT_LOG_IN_AS_GUEST, {})

    async def sign_up(self, email: str, password: str) -> None:
        await self._start_session(ENDPOINT_SIGN_UP, {"email": email, "password": password})

    async def log_in(self, email: str, password: str) -> None:
        await self._start_session(ENDPOINT_LOG_IN, {"email": email, "password": password})

    async def convert_guest_user(self, email: str, password: str) -> None:
        """Attach credentials to the current guest account.

        Pending changes are synchronized first. The session id is kept;
        only the user snapshot is replaced.
        """
        self._ensure_initialized()
        session = self._require_session()

        await self.synchronize_user()

        result = await self._make_request(
            ENDPOINT_CONVERT_GUEST_USER,
            {"sessionId": session.session_id, "email": email, "password": password},
        )
        response = self._parse(UserDataResponse, result, ENDPOINT_CONVERT_GUEST_USER)

        session.user_data = dict(response.user_data)
        await self._save_user(session)
        _logger.info("Converted guest user")

    async def log_out(self) -> LogOutResult:
        """Synchronize, invalidate the session on the server, clear local state.

        A failing synchronization is raised and nothing is cleared. Once
        that succeeded, local state is cleared whether or not the server
        acknowledges the log-out; the result says which happened.
        """
        self._ensure_initialized()
        session = self._session
        if session is None:
            return LogOutResult(acknowledged=True)

        await self.synchronize_user()

        outcome = LogOutResult(acknowledged=True)
        try:
            await self._make_request(ENDPOINT_LOG_OUT, {"sessionId": session.session_id})
        except HotaruError as exc:
            _logger.warning("Server did not acknowledge log-out; clearing local session anyway: %s", exc)
            outcome = LogOutResult(acknowledged=False, error=str(exc))
        finally:
            await self._clear_session()

        _logger.info("Logged out acknowledged=%s", outcome.acknowledged)
        return outcome

    async def force_log_out(self) -> None:
        """Drop local session state without contacting the server."""
        self._ensure_initialized()
        await self._clear_session()
        _logger.info("Forced local log-out")

    # ------------------------------------------------------------------
    # Synchronization
    # ------------------------------------------------------------------

    async def synchronize_user(self) -> None:
        """Send pending changes and merge back the server's snapshot.

        Does nothing when logged out. Changes the server does not report
        as processed stay queued, in order, for the next call.
        """
        self._ensure_initialized()
        session = self._session
        if session is None:
            return

        result = await self._make_request(
            ENDPOINT_SYNCHRONIZE_USER,
            {"sessionId": session.session_id, "clientChangelog": session.changelog.to_wire()},
        )
        response = self._parse(SyncResponse, result, ENDPOINT_SYNCHRONIZE_USER)

        session.user_data = dict(response.user_data)
        pruned = session.changelog.prune(response.processed_changes)
        await self._save_user(session)
        _logger.debug("Synchronized user processed=%d pending=%d", pruned, len(session.changelog))

    async def save_user(self) -> None:
        """Persist local edits and the pending changelog without contacting the server.

        Lets unsynchronized edits survive a restart. Does nothing when
        logged out.
        """
        self._ensure_initialized()
        if self._session is not None:
            await self._save_user(self._session)

    # ------------------------------------------------------------------
    # Queries and server functions
    # ------------------------------------------------------------------

    async def run_query(self, query: Query) -> list[Any]:
        """Run a raw query. Requires ``config.master_key``."""
        self._ensure_initialized()
        assert self._config is not None  # noqa: S101
        master_key = self._config.master_key
        if not master_key:
            raise HotaruMasterKeyRequiredError("run_query requires a master key")

        result = await self._make_request(
            ENDPOINT_RUN_QUERY,
            {"masterKey": master_key, "queryData": query.serialize()},
        )
        return self._parse(QueryResponse, result, ENDPOINT_RUN_QUERY).query_result

    async def run(self, name: str, params: Any = None) -> Any:
        """Invoke the server function *name* and return its result.

        *name* becomes part of the request URL, so only ASCII letters and
        digits are accepted.
        """
        self._ensure_initialized()
        if not isinstance(name, str) or not _FUNCTION_NAME_RE.fullmatch(name):
            raise HotaruNonAlphanumericFunctionNameError(f"Function name must be alphanumeric: {name!r}")

        session_id = self._session.session_id if self._session is not None else None
        return await self._make_request(name, {"sessionId": session_id, "params": params})
