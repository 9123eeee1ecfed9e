"""Relay new VK wall posts into a Telegram channel."""

__version__ = "0.1.0"
