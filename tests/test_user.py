from __future__ import annotations

import pytest

from pyhotaru.client import HotaruClient
from pyhotaru.exceptions import HotaruStaleUserError
from pyhotaru.models.changelog import ChangeKind


@pytest.mark.asyncio
async def test_set_updates_snapshot_and_coalesces(client: HotaruClient) -> None:
    await client.log_in_as_guest()
    user = client.current_user()
    assert user is not None

    user.set("name", "v1")
    user.set("name", "v2")

    changes = list(client._session.changelog)  # noqa: SLF001
    assert user.get("name") == "v2"
    assert [(c.kind, c.field, c.value) for c in changes] == [(ChangeKind.SET, "name", "v2")]


@pytest.mark.asyncio
async def test_increment_and_append_are_local_and_queued(client: HotaruClient) -> None:
    await client.log_in_as_guest()
    user = client.current_user()
    assert user is not None

    user.increment("visits")
    user.increment("visits", 2)
    user.append("tags", "a")
    user.append("tags", "b")

    assert user.get("visits") == 3
    assert user.get("tags") == ["a", "b"]
    kinds = [c.kind for c in client._session.changelog]  # noqa: SLF001
    assert kinds == [ChangeKind.INCREMENT, ChangeKind.INCREMENT, ChangeKind.APPEND, ChangeKind.APPEND]


@pytest.mark.asyncio
async def test_type_mismatches_are_rejected_without_queueing(client: HotaruClient) -> None:
    await client.log_in_as_guest()
    user = client.current_user()
    assert user is not None
    user.set("name", "Ada")

    with pytest.raises(TypeError):
        user.increment("name")
    with pytest.raises(TypeError):
        user.append("name", "x")

    assert len(client._session.changelog) == 1  # noqa: SLF001


@pytest.mark.asyncio
async def test_handle_is_sealed(client: HotaruClient) -> None:
    await client.log_in_as_guest()
    user = client.current_user()
    assert user is not None

    with pytest.raises(AttributeError):
        user.name = "Ada"  # type: ignore[attr-defined]
    with pytest.raises(AttributeError):
        user.set = lambda *_: None  # type: ignore[method-assign]
    with pytest.raises(AttributeError):
        del user.get


@pytest.mark.asyncio
async def test_reads_are_copies(client: HotaruClient) -> None:
    await client.log_in_as_guest()
    user = client.current_user()
    assert user is not None
    user.set("tags", ["a"])

    user.get("tags").append("sneaky")
    user.fields()["name"] = "sneaky"

    assert user.get("tags") == ["a"]
    assert "name" not in user


@pytest.mark.asyncio
async def test_handles_share_live_session(client: HotaruClient) -> None:
    await client.log_in_as_guest()
    first = client.current_user()
    second = client.current_user()
    assert first is not None and second is not None
    assert first is not second

    first.set("name", "Ada")

    assert second.get("name") == "Ada"


@pytest.mark.asyncio
async def test_handle_goes_stale_after_log_out(client: HotaruClient) -> None:
    await client.log_in_as_guest()
    user = client.current_user()
    assert user is not None

    await client.force_log_out()

    with pytest.raises(HotaruStaleUserError):
        user.get("name")
    with pytest.raises(HotaruStaleUserError):
        user.set("name", "Ada")


@pytest.mark.asyncio
async def test_handle_sees_snapshot_replaced_by_sync(client: HotaruClient) -> None:
    await client.log_in_as_guest()
    user = client.current_user()
    assert user is not None
    user.set("name", "Ada")

    await client.synchronize_user()

    assert user.get("name") == "Ada"
