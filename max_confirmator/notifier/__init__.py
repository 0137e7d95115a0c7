"""Notification helpers."""

from .telegram import format_run_summary, send_run_summary

__all__ = ["format_run_summary", "send_run_summary"]
