"""VK feed adapter."""

from vk_relay.adapters.vk.vk_client import VKClient

__all__ = ["VKClient"]
