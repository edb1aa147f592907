"""Key-value storage plug point and the typed bridge the engine uses on top of it."""

from __future__ import annotations

from typing import Any, Protocol

from pyhotaru import _serialization

Primitive = bool | int | float | str


class Storage(Protocol):
    """Structural storage interface.

    Any object with these three coroutines can back the engine (a file,
    a keyring, a database row). Each call is expected to be atomic on
    its own; the engine never relies on atomicity across keys.
    """

    async def get_item(self, key: str) -> Any:
        ...

    async def set_item(self, key: str, value: Any) -> None:
        ...

    async def remove_item(self, key: str) -> None:
        ...


class EphemeralStorage:
    """Default storage that keeps everything in memory.

    Nothing survives a process restart.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    async def get_item(self, key: str) -> Any:
        return self._data.get(key)

    async def set_item(self, key: str, value: Any) -> None:
        self._data[key] = value

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class StorageController:
    """Wraps a :class:`Storage` so primitives and objects can be stored directly.

    Objects are stored as date-aware JSON strings so that embedded
    ``datetime`` values round-trip exactly.
    """

    def __init__(self, storage: Storage | None = None) -> None:
        self._storage: Storage = storage if storage is not None else EphemeralStorage()

    @property
    def storage(self) -> Storage:
        return self._storage

    async def get_primitive(self, key: str) -> Primitive | None:
        return await self._storage.get_item(key)

    async def set_primitive(self, key: str, value: Primitive) -> None:
        if not isinstance(value, (bool, int, float, str)):
            raise TypeError(f"{key}: expected bool, int, float or str, got {type(value).__name__}")
        await self._storage.set_item(key, value)

    async def get_object(self, key: str) -> Any:
        text = await self._storage.get_item(key)
        if text is None:
            return None
        return _serialization.loads(text)

    async def set_object(self, key: str, value: Any) -> None:
        await self._storage.set_item(key, _serialization.dumps(value))

    async def remove_item(self, key: str) -> None:
        await self._storage.remove_item(key)
