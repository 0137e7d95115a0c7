from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
import json
import logging
from typing import Any, Callable, Dict, List, Sequence

from ..api.client import MaxJeuneClient
from ..api.errors import CredentialStoreError, MaxJeuneError
from ..config.settings import Settings
from ..models.credential import Credential
from ..models.travel import Card
from ..notifier.telegram import send_run_summary
from ..store import ParameterStore, build_store, dump_credentials, load_credentials, persist_in_background

LOGGER = logging.getLogger(__name__)

ClientFactory = Callable[[Credential], MaxJeuneClient]


@dataclass(slots=True)
class ConfirmationReport:
    """Outcome of one run: confirmed travels per card and users that failed."""

    confirmed_by_card: Dict[str, int] = field(default_factory=dict)
    failed_users: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.confirmed_by_card.values())


def client_factory_from_settings(settings: Settings) -> ClientFactory:
    def factory(credential: Credential) -> MaxJeuneClient:
        return MaxJeuneClient(
            credential.access_token,
            datadome_cookie=credential.datadome_cookie,
            base_url=settings.base_url,
            timeout=settings.request_timeout_seconds,
            proactive_refresh=settings.proactive_refresh,
        )

    return factory


async def confirm_users_travels(
    credentials: Sequence[Credential],
    client_factory: ClientFactory,
    *,
    store: ParameterStore,
    parameter_name: str,
    lookback: timedelta = timedelta(hours=24),
    now: datetime | None = None,
    logger: logging.Logger | None = None,
) -> ConfirmationReport:
    """Confirm every pending travel of every user, one user at a time.

    Credentials are updated in place with the tokens the API rotated, then the
    whole collection is written back to ``store`` in the background.
    """

    log = logger or LOGGER
    since = (now or datetime.now(timezone.utc)) - lookback
    report = ConfirmationReport()

    try:
        for credential in credentials:
            client = client_factory(credential)
            try:
                await _confirm_user_travels(client, credential, since, report, log)
            finally:
                await client.aclose()
                _sync_tokens(credential, client)
    finally:
        # Tokens rotated so far are written back even if the batch is cut short.
        log.debug("Updating users in the parameter store...")
        persist_in_background(store, parameter_name, dump_credentials(credentials), logger=log)
    return report


async def _confirm_user_travels(
    client: MaxJeuneClient,
    credential: Credential,
    since: datetime,
    report: ConfirmationReport,
    log: logging.Logger,
) -> None:
    log.debug("Retrieving customer info for user %s...", credential.label)
    try:
        customer = await client.get_customer_info()
    except MaxJeuneError as exc:
        log.error("Error retrieving customer info for user %s: %s", credential.label, exc)
        report.failed_users.append(credential.label)
        return
    finally:
        _sync_tokens(credential, client)

    credential.name = customer.full_name or credential.name

    cards = customer.eligible_cards()
    if not cards:
        log.info("No valid TGV_MAX_JEUNE cards found for user %s.", credential.label)
        return
    log.debug(
        "Found %d valid TGV_MAX_JEUNE cards for user %s: %s",
        len(cards),
        credential.label,
        ", ".join(card.card_number for card in cards),
    )

    for card in cards:
        await _confirm_card_travels(client, credential, card, since, report, log)


async def _confirm_card_travels(
    client: MaxJeuneClient,
    credential: Credential,
    card: Card,
    since: datetime,
    report: ConfirmationReport,
    log: logging.Logger,
) -> None:
    card_number = card.card_number
    report.confirmed_by_card.setdefault(card_number, 0)

    log.debug("Retrieving travels for card number %s...", card_number)
    try:
        travels = await client.get_travels(card_number, since)
    except MaxJeuneError as exc:
        log.error("Error retrieving travels for card number %s: %s", card_number, exc)
        return
    finally:
        _sync_tokens(credential, client)

    to_confirm = [travel for travel in travels if travel.needs_confirmation]
    log.info(
        "Card %s: %d travels, %d to confirm",
        card_number,
        len(travels),
        len(to_confirm),
    )

    for travel in to_confirm:
        log.debug("Confirming travel %s for card number %s...", travel.order_id, card_number)
        try:
            await client.confirm_travel(travel)
        except MaxJeuneError as exc:
            log.error("Error confirming travel %s for card number %s: %s", travel.order_id, card_number, exc)
        else:
            report.confirmed_by_card[card_number] += 1
        finally:
            _sync_tokens(credential, client)


def _sync_tokens(credential: Credential, client: MaxJeuneClient) -> None:
    credential.access_token = client.access_token
    if client.datadome_cookie:
        credential.datadome_cookie = client.datadome_cookie


def format_confirmation_message(report: ConfirmationReport) -> str:
    if report.total == 0:
        return "No travels confirmed."
    lines = "\n".join(f"- {card_number}: {count}" for card_number, count in report.confirmed_by_card.items())
    return f"Travels confirmed: {lines}"


async def run_confirmation_once(
    settings: Settings,
    *,
    store: ParameterStore | None = None,
    client_factory: ClientFactory | None = None,
    notify: bool = True,
    now: datetime | None = None,
) -> Dict[str, Any]:
    """Execute one confirmation run and return a ``{statusCode, body}`` result."""

    active_store = store or build_store(settings)
    try:
        credentials = await load_credentials(active_store, settings.users_parameter_name)
    except CredentialStoreError as exc:
        LOGGER.error("%s", exc)
        return {"statusCode": 500, "body": json.dumps({"message": str(exc)})}

    report = await confirm_users_travels(
        credentials,
        client_factory or client_factory_from_settings(settings),
        store=active_store,
        parameter_name=settings.users_parameter_name,
        lookback=settings.travels_lookback,
        now=now,
    )
    LOGGER.info(
        "Run finished: %d travels confirmed across %d cards, %d users failed",
        report.total,
        len(report.confirmed_by_card),
        len(report.failed_users),
    )

    if notify:
        await _dispatch_telegram_summary(report, settings)

    return {"statusCode": 204, "body": json.dumps({"message": format_confirmation_message(report)})}


async def _dispatch_telegram_summary(report: ConfirmationReport, settings: Settings) -> None:
    if not settings.telegram_enabled:
        return
    if report.total == 0 and not report.failed_users:
        LOGGER.debug("Nothing to report; skipping Telegram summary")
        return
    try:
        await asyncio.to_thread(
            send_run_summary,
            token=settings.telegram_bot_token,
            chat_id=settings.telegram_chat_id,
            confirmed_by_card=report.confirmed_by_card,
            failed_users=report.failed_users,
        )
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Telegram summary failed: %s", exc)
