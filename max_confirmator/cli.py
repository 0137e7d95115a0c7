from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import List

from .api.errors import CredentialStoreError
from .config import Settings, load_settings
from .handler import configure_logging
from .models.credential import Credential
from .runner.job import run_confirmation_once
from .store import ParameterStore, build_store, dump_credentials, load_credentials, wait_for_pending_writes


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="max-confirmator command-line interface")
    parser.add_argument("--store-file", type=Path, default=None, help="Use a local JSON file as the credential store")
    parser.add_argument("--log-level", default=None, help="Logging level (INFO, DEBUG, ...)")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("run-once", help="Confirm every pending travel once")
    add_user_parser = subparsers.add_parser("add-user", help="Store a new user access token")
    add_user_parser.add_argument("--token", required=True, help="Value of the auth cookie")
    add_user_parser.add_argument("--name", default=None, help="Label used to identify the user")
    add_user_parser.add_argument("--datadome", default=None, help="Optional datadome cookie value")
    subparsers.add_parser("list-users", help="Show stored users with masked tokens")
    return parser


async def _run_once(settings: Settings) -> None:
    result = await run_confirmation_once(settings)
    await wait_for_pending_writes()
    print(json.dumps(result, indent=2))


async def _stored_users(store: ParameterStore, name: str) -> List[Credential]:
    # A missing parameter starts an empty list; a malformed one must not be overwritten.
    if await store.get(name) is None:
        return []
    return await load_credentials(store, name)


async def _add_user(settings: Settings, token: str, name: str | None, datadome: str | None) -> None:
    store = build_store(settings)
    credentials = await _stored_users(store, settings.users_parameter_name)
    credentials.append(Credential(access_token=token, name=name, datadome_cookie=datadome))
    await store.put(settings.users_parameter_name, dump_credentials(credentials))
    print(f"Stored {len(credentials)} users in {settings.users_parameter_name}")


async def _list_users(settings: Settings) -> None:
    credentials = await _stored_users(build_store(settings), settings.users_parameter_name)
    if not credentials:
        print("No users stored.")
        return
    for credential in credentials:
        print(f"{credential.label}\t{credential.masked_token()}")


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    settings = load_settings(credentials_file=args.store_file)
    configure_logging(args.log_level or settings.log_level)

    try:
        if args.command == "run-once":
            asyncio.run(_run_once(settings))
        elif args.command == "add-user":
            asyncio.run(_add_user(settings, args.token, args.name, args.datadome))
        elif args.command == "list-users":
            asyncio.run(_list_users(settings))
        else:  # pragma: no cover - argparse enforces valid commands
            parser.error("Unknown command")
    except CredentialStoreError as exc:
        parser.exit(1, f"error: {exc}\n")


if __name__ == "__main__":
    main()
