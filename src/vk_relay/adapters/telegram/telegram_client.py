"""Telegram Bot API client for posting into a channel."""

import asyncio
import logging
from typing import Any, Optional

from vk_relay.adapters.http import parse_json, send_request
from vk_relay.core import ChannelClient
from vk_relay.errors import BridgeError, PartialDeliveryError, RemoteApiError, TransportError

LOGGER = logging.getLogger(__name__)

# sendMediaGroup accepts 2-10 items
MAX_ALBUM_SIZE = 10


class TelegramClient(ChannelClient):
    """Send messages to a channel via the Telegram Bot API."""

    def __init__(
        self,
        bot_token: str,
        channel_id: str,
        parse_mode: str = "HTML",
        timeout: float = 30.0,
        max_retries: int = 3,
        initial_retry_delay: float = 1.0,
        album_limit: int = MAX_ALBUM_SIZE,
    ) -> None:
        self.channel_id = channel_id
        self.parse_mode = parse_mode
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.initial_retry_delay = initial_retry_delay
        self.album_limit = max(2, min(album_limit, MAX_ALBUM_SIZE))
        self.base_url = f"https://api.telegram.org/bot{bot_token}"

    def _with_caption(self, payload: dict[str, Any], caption: str) -> dict[str, Any]:
        if caption:
            payload["caption"] = caption
            payload["parse_mode"] = self.parse_mode
        return payload

    async def send_text(self, text: str) -> int:
        result = await self._call_api("sendMessage", {
            "chat_id": self.channel_id,
            "text": text,
            "parse_mode": self.parse_mode,
            "disable_web_page_preview": True,
        })
        return result["message_id"]

    async def send_photo(self, url: str, caption: str = "") -> int:
        payload = self._with_caption({"chat_id": self.channel_id, "photo": url}, caption)
        result = await self._call_api("sendPhoto", payload)
        return result["message_id"]

    async def send_album(self, urls: list[str], caption: str = "") -> list[int]:
        """Send photos as albums of up to ten, caption on the very first photo.

        A single photo left over after chunking is sent with sendPhoto. When a
        later chunk fails after the first one went out, PartialDeliveryError
        carries the number of delivered messages.
        """
        message_ids: list[int] = []

        for start in range(0, len(urls), self.album_limit):
            chunk = urls[start:start + self.album_limit]
            try:
                message_ids.extend(await self._send_album_chunk(chunk, caption if start == 0 else ""))
            except BridgeError as e:
                if not message_ids:
                    raise
                raise PartialDeliveryError(
                    f"Album stopped after {len(message_ids)} of {len(urls)} photos: {e}",
                    delivered=len(message_ids),
                ) from e

        return message_ids

    async def _send_album_chunk(self, chunk: list[str], caption: str) -> list[int]:
        if len(chunk) == 1:
            return [await self.send_photo(chunk[0], caption)]

        media = []
        for index, url in enumerate(chunk):
            entry: dict[str, Any] = {"type": "photo", "media": url}
            if index == 0:
                self._with_caption(entry, caption)
            media.append(entry)

        result = await self._call_api("sendMediaGroup", {
            "chat_id": self.channel_id,
            "media": media,
        })
        return [message["message_id"] for message in result]

    async def send_animation(self, url: str, caption: str = "") -> int:
        payload = self._with_caption({"chat_id": self.channel_id, "animation": url}, caption)
        result = await self._call_api("sendAnimation", payload)
        return result["message_id"]

    async def send_audio(
        self,
        url: str,
        caption: str = "",
        title: Optional[str] = None,
        performer: Optional[str] = None,
        duration: Optional[int] = None,
    ) -> int:
        payload = self._with_caption({"chat_id": self.channel_id, "audio": url}, caption)
        if title:
            payload["title"] = title
        if performer:
            payload["performer"] = performer
        if duration:
            payload["duration"] = duration
        result = await self._call_api("sendAudio", payload)
        return result["message_id"]

    async def send_document(self, url: str, caption: str = "") -> int:
        payload = self._with_caption({"chat_id": self.channel_id, "document": url}, caption)
        result = await self._call_api("sendDocument", payload)
        return result["message_id"]

    async def _call_api(self, method: str, payload: dict[str, Any]) -> Any:
        """Call a Bot API method with retry logic for flood control and server errors."""
        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1

            response = await send_request(
                "POST", f"{self.base_url}/{method}", self.timeout, json=payload
            )

            # Flood control - Telegram tells us how long to wait
            if response.status_code == 429 and not last_attempt:
                retry_after = self._get_retry_delay(response, attempt)
                LOGGER.warning(
                    "Telegram rate limit hit, retrying after %.1fs (attempt %d/%d)",
                    retry_after, attempt + 1, self.max_retries,
                )
                await asyncio.sleep(retry_after)
                continue

            if response.status_code >= 500 and not last_attempt:
                retry_delay = self.initial_retry_delay * (2 ** attempt)
                LOGGER.warning(
                    "Telegram server error %s, retrying after %.1fs",
                    response.status_code, retry_delay,
                )
                await asyncio.sleep(retry_delay)
                continue

            data = parse_json(response)
            if not isinstance(data, dict):
                raise TransportError(f"Unexpected Telegram response for {method}")
            if not data.get("ok"):
                raise RemoteApiError(
                    f"Telegram API error in {method}: {data.get('description', 'unknown error')}",
                    code=data.get("error_code", response.status_code),
                )
            return data["result"]

        raise TransportError(f"Telegram call {method} failed after {self.max_retries} attempts")

    def _get_retry_delay(self, response: Any, attempt: int) -> float:
        """Calculate retry delay from the error payload or use exponential backoff."""
        try:
            retry_after = response.json().get("parameters", {}).get("retry_after")
            if retry_after is not None:
                return float(retry_after)
        except (ValueError, AttributeError):
            pass

        return self.initial_retry_delay * (2 ** attempt)
