"""Confirmation run orchestration."""

from .job import ConfirmationReport, confirm_users_travels, format_confirmation_message, run_confirmation_once

__all__ = [
    "ConfirmationReport",
    "confirm_users_travels",
    "format_confirmation_message",
    "run_confirmation_once",
]
