from __future__ import annotations

import logging
from typing import List, Mapping, Sequence

import requests

LOGGER = logging.getLogger(__name__)
API_BASE = "https://api.telegram.org"
TELEGRAM_MESSAGE_LIMIT = 4000
SECTION_DIVIDER = "────────────────────"


def send_run_summary(
    *,
    token: str,
    chat_id: str,
    confirmed_by_card: Mapping[str, int],
    failed_users: Sequence[str],
) -> None:
    """Send the outcome of a confirmation run to a Telegram chat."""

    message = format_run_summary(confirmed_by_card, failed_users)
    for chunk in split_message_for_telegram(message):
        if chunk.strip():
            _post_message(token, chat_id, chunk)


def format_run_summary(confirmed_by_card: Mapping[str, int], failed_users: Sequence[str]) -> str:
    total = sum(confirmed_by_card.values())
    lines = [
        "🚆 MAX JEUNE CONFIRMATIONS",
        "",
        f"Confirmed travels : {total}",
        SECTION_DIVIDER,
    ]

    for card_number, count in confirmed_by_card.items():
        lines.append(f"Card {card_number} : {count}")

    if failed_users:
        lines.append(SECTION_DIVIDER)
        lines.append("⚠️ Credentials that failed (token may need renewal):")
        lines.extend(f"   - {user}" for user in failed_users)

    return "\n".join(lines).strip()


def split_message_for_telegram(text: str, max_length: int = TELEGRAM_MESSAGE_LIMIT) -> List[str]:
    """Split large telegram payloads into safe chunks."""

    if len(text) <= max_length:
        return [text]

    chunks: List[str] = []
    current_lines: List[str] = []
    current_len = 0

    def flush_current() -> None:
        nonlocal current_lines, current_len
        if current_lines:
            chunks.append("\n".join(current_lines))
            current_lines = []
            current_len = 0

    for line in text.splitlines():
        line_len = len(line)
        if line_len > max_length:
            flush_current()
            for start in range(0, line_len, max_length):
                chunks.append(line[start : start + max_length])
            continue

        addition = line_len if not current_lines else line_len + 1
        if current_len + addition > max_length:
            flush_current()
        current_lines.append(line)
        current_len += addition

    flush_current()
    return chunks or [""]


def _post_message(token: str, chat_id: str, text: str) -> None:
    url = f"{API_BASE}/bot{token}/sendMessage"
    payload = {"chat_id": chat_id, "text": text, "disable_web_page_preview": True}
    response = requests.post(url, json=payload, timeout=10)
    if response.status_code >= 400:
        LOGGER.error("Telegram notification failed: %s | %s", response.status_code, response.text)
    else:
        LOGGER.info("Telegram notification sent")
