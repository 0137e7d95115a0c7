from __future__ import annotations

import asyncio
import json
import logging
from typing import Iterable, List, Protocol, Set

from ..api.errors import CredentialStoreError
from ..models.credential import Credential

LOGGER = logging.getLogger(__name__)

_PENDING_WRITES: Set[asyncio.Task[None]] = set()


class ParameterStore(Protocol):
    async def get(self, name: str) -> str | None: ...

    async def put(self, name: str, value: str) -> None: ...


async def load_credentials(
    store: ParameterStore,
    name: str,
    *,
    logger: logging.Logger | None = None,
) -> List[Credential]:
    """Read and decode the stored user list.

    Raises ``CredentialStoreError`` when the parameter is missing, is not JSON,
    or is not a JSON array. Entries without an access token are dropped.
    """

    log = logger or LOGGER
    log.debug("Getting users from parameter %s...", name)

    raw = await store.get(name)
    if not raw:
        raise CredentialStoreError("Cannot get users from the parameter store.", parameter_name=name)

    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise CredentialStoreError("Cannot parse users from the parameter store.", parameter_name=name) from exc

    if not isinstance(payload, list):
        raise CredentialStoreError("Stored users is not an array.", parameter_name=name)

    credentials: List[Credential] = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict) or not item.get("accessToken"):
            log.warning("Dropping stored user #%d: no access token", index)
            continue
        credentials.append(Credential.from_dict(item))

    log.debug("Found %d valid users.", len(credentials))
    return credentials


def dump_credentials(credentials: Iterable[Credential]) -> str:
    return json.dumps([credential.to_dict() for credential in credentials])


def persist_in_background(
    store: ParameterStore,
    name: str,
    value: str,
    *,
    logger: logging.Logger | None = None,
) -> asyncio.Task[None]:
    """Dispatch ``store.put`` without waiting for it.

    ``value`` is an already-encoded snapshot. The task is tracked until it
    finishes so ``wait_for_pending_writes`` can flush it before shutdown.
    """

    log = logger or LOGGER

    async def _write() -> None:
        try:
            await store.put(name, value)
        except Exception as exc:  # noqa: BLE001
            log.error("Error updating users in the parameter store: %s", exc)
        else:
            log.debug("Users written back to parameter %s", name)

    task = asyncio.create_task(_write())
    _PENDING_WRITES.add(task)
    task.add_done_callback(_PENDING_WRITES.discard)
    return task


async def wait_for_pending_writes() -> None:
    loop = asyncio.get_running_loop()
    pending = [task for task in _PENDING_WRITES if task.get_loop() is loop]
    if pending:
        await asyncio.gather(*pending)
