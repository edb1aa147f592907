#!/usr/bin/env python3
"""Manual smoke client for a live Hotaru server.

State is kept in a JSON file between invocations, so a sequence like::

    hotaru_cli.py guest
    hotaru_cli.py set name Ada
    hotaru_cli.py show
    hotaru_cli.py sync
    hotaru_cli.py logout

behaves like one app session spread over several processes.

Configuration comes from ``HOTARU_SERVER_URL`` (and the other
``HOTARU_*`` variables read by :meth:`HotaruConfig.from_env`).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from pyhotaru import HotaruClient, HotaruConfig, HotaruError

_DEFAULT_STATE = Path.home() / ".hotaru_cli_state.json"


class JsonFileStorage:
    """Minimal persistent storage: one JSON object on disk, rewritten on every change."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def _read(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        return json.loads(self._path.read_text(encoding="utf-8"))

    def _write(self, data: dict[str, Any]) -> None:
        self._path.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")

    async def get_item(self, key: str) -> Any:
        return self._read().get(key)

    async def set_item(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    async def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


def _parse_value(raw: str) -> Any:
    """Interpret CLI values as JSON when possible, else as plain strings."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--state", type=Path, default=_DEFAULT_STATE, help="state file (default: %(default)s)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable DEBUG logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("guest", help="log in as a new guest user")
    for name in ("signup", "login", "convert"):
        cmd = sub.add_parser(name)
        cmd.add_argument("email")
        cmd.add_argument("password")

    cmd = sub.add_parser("set", help="set a field locally (sync to send it)")
    cmd.add_argument("field")
    cmd.add_argument("value")

    cmd = sub.add_parser("increment", help="increment a numeric field locally")
    cmd.add_argument("field")
    cmd.add_argument("amount", nargs="?", default="1")

    sub.add_parser("show", help="print the local user snapshot")
    sub.add_parser("sync", help="synchronize pending changes")
    sub.add_parser("logout")
    sub.add_parser("force-logout")

    cmd = sub.add_parser("run", help="call a server function")
    cmd.add_argument("name")
    cmd.add_argument("params", nargs="?", default="null", help="JSON params")
    return parser


async def _dispatch(client: HotaruClient, args: argparse.Namespace) -> Any:
    command = args.command
    if command == "guest":
        await client.log_in_as_guest()
    elif command == "signup":
        await client.sign_up(args.email, args.password)
    elif command == "login":
        await client.log_in(args.email, args.password)
    elif command == "convert":
        await client.convert_guest_user(args.email, args.password)
    elif command in ("set", "increment", "show"):
        user = client.current_user()
        if user is None:
            raise SystemExit("Not logged in")
        if command == "set":
            user.set(args.field, _parse_value(args.value))
        elif command == "increment":
            user.increment(args.field, _parse_value(args.amount))
        await client.save_user()
        return user.fields()
    elif command == "sync":
        await client.synchronize_user()
        user = client.current_user()
        return user.fields() if user is not None else None
    elif command == "logout":
        return (await client.log_out()).model_dump()
    elif command == "force-logout":
        await client.force_log_out()
    elif command == "run":
        return await client.run(args.name, _parse_value(args.params))
    return None


async def _main(args: argparse.Namespace) -> int:
    config = HotaruConfig.from_env()
    async with HotaruClient() as client:
        await client.initialize(config, storage=JsonFileStorage(args.state))
        try:
            result = await _dispatch(client, args)
        except HotaruError as exc:
            print(f"error: {type(exc).__name__}: {exc}", file=sys.stderr)
            return 1
    if result is not None:
        print(json.dumps(result, indent=2, default=str))
    return 0


def main() -> None:
    args = _build_parser().parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    raise SystemExit(asyncio.run(_main(args)))


if __name__ == "__main__":
    main()
