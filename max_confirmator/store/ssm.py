from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3

LOGGER = logging.getLogger(__name__)


class SSMParameterStore:
    """AWS Systems Manager Parameter Store as a best-effort key-value store.

    Values are read with decryption and written as ``SecureString``. Neither
    operation raises: failures are logged and ``get`` returns ``None``.
    """

    def __init__(self, region: str, *, client: Any = None, logger: logging.Logger | None = None) -> None:
        self.region = region
        self._client = client
        self._logger = logger or LOGGER

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("ssm", region_name=self.region)
        return self._client

    async def get(self, name: str) -> str | None:
        try:
            data = await asyncio.to_thread(self.client.get_parameter, Name=name, WithDecryption=True)
        except Exception as exc:  # noqa: BLE001
            self._logger.error("Error retrieving parameter %s from AWS SSM: %s", name, exc)
            return None
        return (data or {}).get("Parameter", {}).get("Value")

    async def put(self, name: str, value: str) -> None:
        try:
            await asyncio.to_thread(
                self.client.put_parameter,
                Name=name,
                Value=value,
                Type="SecureString",
                Overwrite=True,
            )
        except Exception as exc:  # noqa: BLE001
            self._logger.error("Error updating parameter %s in AWS SSM: %s", name, exc)
