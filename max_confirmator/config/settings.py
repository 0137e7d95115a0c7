from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_BASE_URL = "https://www.maxjeune-tgvinoui.sncf/api/public"
DEFAULT_REGION = "eu-west-3"
DEFAULT_USERS_PARAMETER = "/SNCFMaxJeune/users"
DEFAULT_CREDENTIALS_FILE = "credentials.json"
STORE_BACKENDS = ("ssm", "file")


def _parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _parse_int(value: str | None, default: int | None = None) -> int | None:
    if value is None or value.strip() == "":
        return default
    return int(value)


def _parse_float(value: str | None, default: float) -> float:
    if value is None or value.strip() == "":
        return default
    return float(value)


@dataclass(slots=True)
class Settings:
    """Aggregated runtime configuration."""

    base_url: str = DEFAULT_BASE_URL
    credential_store: str = "ssm"
    aws_region: str = DEFAULT_REGION
    users_parameter_name: str = DEFAULT_USERS_PARAMETER
    credentials_file: Path = Path(DEFAULT_CREDENTIALS_FILE)
    request_timeout_seconds: float = 10.0
    proactive_refresh: bool = False
    travels_lookback_hours: int = 24
    log_level: str = "INFO"
    telegram_bot_token: str | None = None
    telegram_chat_id: str | None = None

    @property
    def travels_lookback(self) -> timedelta:
        return timedelta(hours=self.travels_lookback_hours)

    @property
    def telegram_enabled(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)


def load_settings(credentials_file: str | Path | None = None) -> Settings:
    """Load configuration from environment variables (and a .env file).

    Passing ``credentials_file`` forces the local file store, which is what the
    CLI's ``--store-file`` flag does.
    """

    store = (os.getenv("CREDENTIAL_STORE", "ssm") or "ssm").strip().lower()
    if credentials_file:
        store = "file"
    if store not in STORE_BACKENDS:
        raise ValueError(f"CREDENTIAL_STORE must be one of {', '.join(STORE_BACKENDS)}, got {store!r}")

    file_path = credentials_file or os.getenv("CREDENTIALS_FILE") or DEFAULT_CREDENTIALS_FILE
    lookback = _parse_int(os.getenv("TRAVELS_LOOKBACK_HOURS"), default=24)
    if lookback is None or lookback < 0:
        raise ValueError("TRAVELS_LOOKBACK_HOURS must be a non-negative integer")

    timeout = _parse_float(os.getenv("REQUEST_TIMEOUT_SECONDS"), default=10.0)
    if timeout <= 0:
        raise ValueError("REQUEST_TIMEOUT_SECONDS must be positive")

    return Settings(
        base_url=(os.getenv("MAX_JEUNE_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        credential_store=store,
        aws_region=os.getenv("AWS_REGION") or DEFAULT_REGION,
        users_parameter_name=os.getenv("USERS_PARAMETER_NAME") or DEFAULT_USERS_PARAMETER,
        credentials_file=Path(file_path).expanduser(),
        request_timeout_seconds=timeout,
        proactive_refresh=_parse_bool(os.getenv("PROACTIVE_REFRESH")),
        travels_lookback_hours=lookback,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        telegram_bot_token=os.getenv("TELEGRAM_BOT_TOKEN") or None,
        telegram_chat_id=os.getenv("TELEGRAM_CHAT_ID") or None,
    )
