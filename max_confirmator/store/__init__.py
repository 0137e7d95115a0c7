"""Credential storage."""

from __future__ import annotations

from ..config.settings import Settings
from .file import FileParameterStore
from .ssm import SSMParameterStore
from .users import ParameterStore, dump_credentials, load_credentials, persist_in_background, wait_for_pending_writes


def build_store(settings: Settings) -> ParameterStore:
    if settings.credential_store == "file":
        return FileParameterStore(settings.credentials_file)
    return SSMParameterStore(settings.aws_region)


__all__ = [
    "FileParameterStore",
    "ParameterStore",
    "SSMParameterStore",
    "build_store",
    "dump_credentials",
    "load_credentials",
    "persist_in_background",
    "wait_for_pending_writes",
]
