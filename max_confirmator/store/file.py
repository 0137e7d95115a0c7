from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

LOGGER = logging.getLogger(__name__)


class FileParameterStore:
    """Local stand-in for the parameter store: one JSON object of name -> value."""

    def __init__(self, path: str | Path, *, logger: logging.Logger | None = None) -> None:
        self.path = Path(path)
        self._logger = logger or LOGGER

    async def get(self, name: str) -> str | None:
        try:
            parameters = await asyncio.to_thread(self._read)
        except Exception as exc:  # noqa: BLE001
            self._logger.error("Error retrieving parameter %s from %s: %s", name, self.path, exc)
            return None
        value = parameters.get(name)
        if value is None:
            self._logger.error("Parameter %s not found in %s", name, self.path)
            return None
        return str(value)

    async def put(self, name: str, value: str) -> None:
        try:
            await asyncio.to_thread(self._write, name, value)
        except Exception as exc:  # noqa: BLE001
            self._logger.error("Error updating parameter %s in %s: %s", name, self.path, exc)

    def _read(self) -> dict[str, str]:
        with self.path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            raise ValueError("Parameter file must contain a JSON object")
        return payload

    def _write(self, name: str, value: str) -> None:
        parameters = self._read() if self.path.exists() else {}
        parameters[name] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w", encoding="utf-8") as handle:
            json.dump(parameters, handle, indent=2)
