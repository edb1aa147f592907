from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

import pytest
import pytest_asyncio

from pyhotaru.client import HotaruClient
from pyhotaru.config import HotaruConfig
from pyhotaru.storage import EphemeralStorage

SERVER_URL = "https://hotaru.example.com/"


@dataclass
class FakeHotaruBackend:
    """In-process stand-in for a Hotaru server, usable as a request function."""

    server_user: dict[str, Any] = field(default_factory=dict)
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    applied_ids: set[str] = field(default_factory=set)
    unprocessed_ids: set[str] = field(default_factory=set)
    failures: dict[str, Exception] = field(default_factory=dict)
    session_counter: int = 0

    def endpoints(self) -> list[str]:
        return [endpoint for endpoint, _ in self.calls]

    def last_params(self, endpoint: str) -> dict[str, Any]:
        for name, params in reversed(self.calls):
            if name == endpoint:
                return params
        raise AssertionError(f"{endpoint} was never called")

    def _new_session(self, user_data: dict[str, Any]) -> dict[str, Any]:
        self.session_counter += 1
        self.server_user = dict(user_data)
        return {"sessionId": f"sess-{self.session_counter}", "userData": copy.deepcopy(self.server_user)}

    def _apply(self, change: dict[str, Any]) -> None:
        field_name = change["field"]
        if change["type"] == "set":
            self.server_user[field_name] = change["value"]
        elif change["type"] == "increment":
            self.server_user[field_name] = self.server_user.get(field_name, 0) + change["value"]
        elif change["type"] == "append":
            self.server_user[field_name] = [*self.server_user.get(field_name, []), change["value"]]

    async def __call__(self, url: str, params: dict[str, Any]) -> Any:
        assert url.startswith(SERVER_URL), url
        endpoint = url[len(SERVER_URL) :]
        self.calls.append((endpoint, copy.deepcopy(params)))

        failure = self.failures.get(endpoint)
        if failure is not None:
            raise failure

        if endpoint == "_logInAsGuest":
            return self._new_session({})
        if endpoint in ("_signUp", "_logIn"):
            return self._new_session({"email": params["email"]})
        if endpoint == "_convertGuestUser":
            self.server_user["email"] = params["email"]
            return {"userData": copy.deepcopy(self.server_user)}
        if endpoint == "_synchronizeUser":
            processed: list[str] = []
            for change in params["clientChangelog"]:
                if change["_id"] in self.unprocessed_ids:
                    continue
                if change["_id"] not in self.applied_ids:
                    self._apply(change)
                    self.applied_ids.add(change["_id"])
                processed.append(change["_id"])
            return {"userData": copy.deepcopy(self.server_user), "processedChanges": processed}
        if endpoint == "_logOut":
            return None
        if endpoint == "_runQuery":
            return {"queryResult": [{"className": params["queryData"]["className"]}]}
        return {"echo": params["params"], "sessionId": params["sessionId"]}


@pytest.fixture
def backend() -> FakeHotaruBackend:
    return FakeHotaruBackend()


@pytest.fixture
def storage() -> EphemeralStorage:
    return EphemeralStorage()


@pytest.fixture
def config() -> HotaruConfig:
    return HotaruConfig(server_url="https://hotaru.example.com")


@pytest_asyncio.fixture
async def client(config: HotaruConfig, storage: EphemeralStorage, backend: FakeHotaruBackend) -> HotaruClient:
    engine = HotaruClient()
    await engine.initialize(config, storage=storage, request_function=backend)
    return engine

