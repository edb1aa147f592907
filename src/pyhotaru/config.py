"""Client configuration for pyhotaru."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyhotaru._constants import DEFAULT_REQUEST_TIMEOUT, SECURE_SCHEME
from pyhotaru.exceptions import HotaruConfigError, HotaruSslRequiredError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class HotaruConfig:
    """Engine configuration.

    Parameters
    ----------
    server_url : str
        Base URL of the Hotaru server. Must use ``https://`` unless
        ``override_ssl_requirement`` is set. A trailing ``/`` is added
        when missing (see :meth:`resolve_server_url`).
    private_mode : bool
        Reserved flag forwarded to collaborators; the engine itself does
        not act on it.
    override_ssl_requirement : bool
        Allow a plain ``http://`` server URL (local development).
    master_key : str or None
        Elevated key. Required for :meth:`HotaruClient.run_query` and
        sent with every request when set.
    request_timeout : float
        Total timeout in seconds for the default HTTP request function.
    """

    server_url: str
    private_mode: bool = False
    override_ssl_requirement: bool = False
    master_key: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def resolve_server_url(self) -> str:
        """Validate the server URL and return it with a trailing ``/``.

        Raises
        ------
        HotaruConfigError
            If the URL is empty.
        HotaruSslRequiredError
            If the URL is not ``https://`` and the override is not set.
        """
        url = self.server_url.strip()
        if not url:
            raise HotaruConfigError("server_url must be non-empty")
        if not url.startswith(SECURE_SCHEME) and not self.override_ssl_requirement:
            raise HotaruSslRequiredError(f"server_url must start with {SECURE_SCHEME!r}: {url}")
        if not url.endswith("/"):
            url = f"{url}/"
        return url

    @classmethod
    def from_env(cls, **overrides: Any) -> HotaruConfig:
        """Create configuration from environment variables.

        Reads ``HOTARU_SERVER_URL`` and the optional ``HOTARU_MASTER_KEY``,
        ``HOTARU_PRIVATE_MODE``, ``HOTARU_OVERRIDE_SSL_REQUIREMENT`` and
        ``HOTARU_REQUEST_TIMEOUT``. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        HotaruConfig
            Populated configuration.
        """
        env = os.environ
        config_kwargs: dict[str, Any] = {}

        server_url = env.get("HOTARU_SERVER_URL")
        if server_url is not None:
            config_kwargs["server_url"] = server_url

        master_key = env.get("HOTARU_MASTER_KEY")
        if master_key:
            config_kwargs["master_key"] = master_key

        if "private_mode" not in overrides:
            config_kwargs["private_mode"] = _env_bool(env.get("HOTARU_PRIVATE_MODE"), False)

        if "override_ssl_requirement" not in overrides:
            config_kwargs["override_ssl_requirement"] = _env_bool(
                env.get("HOTARU_OVERRIDE_SSL_REQUIREMENT"),
                False,
            )

        timeout_env = env.get("HOTARU_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        config_kwargs.update(overrides)

        if "server_url" not in config_kwargs:
            raise HotaruConfigError("HOTARU_SERVER_URL is not set and no server_url was given")

        return cls(**config_kwargs)
