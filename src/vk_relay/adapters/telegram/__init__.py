"""Telegram channel adapter."""

from vk_relay.adapters.telegram.telegram_client import TelegramClient

__all__ = ["TelegramClient"]
