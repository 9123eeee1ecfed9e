"""VK API client for fetching wall posts and searching audio."""

import asyncio
import logging
import re
from typing import Any

from vk_relay.adapters.http import parse_json, send_request
from vk_relay.adapters.vk.vk_mapper import parse_post, parse_track
from vk_relay.core import AudioTrack, FeedClient, SourceItem
from vk_relay.errors import BridgeError, MalformedItemError, RemoteApiError, TransportError

LOGGER = logging.getLogger(__name__)

# "Too many requests per second"
RATE_LIMIT_ERROR_CODE = 6


class VKClient(FeedClient):
    """VK API client implementation."""

    def __init__(
        self,
        access_token: str,
        group_id: str,
        api_version: str = "5.131",
        timeout: float = 30.0,
        max_retries: int = 3,
        initial_retry_delay: float = 1.0,
        audio_search_count: int = 5,
    ) -> None:
        self.access_token = access_token
        self.group_id = group_id
        self.api_version = api_version
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.initial_retry_delay = initial_retry_delay
        self.audio_search_count = audio_search_count
        self.base_url = "https://api.vk.com/method"

    def _owner_params(self) -> dict[str, str]:
        # Numeric ids address a community by owner_id (negative), anything else is a short name
        if re.fullmatch(r"\d+", self.group_id):
            return {"owner_id": f"-{self.group_id}"}
        return {"domain": self.group_id}

    async def fetch_items(self, count: int = 10, offset: int = 0) -> list[SourceItem]:
        """Fetch posts from the community wall, newest first.

        Posts that cannot be parsed are logged and left out of the batch.
        """
        LOGGER.info("Fetching posts from VK group: %s", self.group_id)
        response = await self._call_api(
            "wall.get",
            {"count": count, "offset": offset, **self._owner_params()},
        )

        items = []
        for raw in response.get("items", []):
            try:
                items.append(parse_post(raw))
            except MalformedItemError as e:
                LOGGER.warning("Skipping malformed post: %s", e)
        return items

    async def lookup_candidates(self, query: str) -> list[AudioTrack]:
        """Search audio tracks, falling back to the general search method."""
        LOGGER.info("Searching for audio track: %s", query)

        try:
            response = await self._call_api(
                "audio.search", {"q": query, "count": self.audio_search_count}
            )
            tracks = self._parse_tracks(response)
            if tracks:
                return tracks
        except BridgeError as e:
            LOGGER.warning("audio.search failed, trying general search: %s", e)

        response = await self._call_api(
            "search", {"q": query, "count": self.audio_search_count * 2, "type": "audio"}
        )
        return self._parse_tracks(response)

    def _parse_tracks(self, response: Any) -> list[AudioTrack]:
        if not isinstance(response, dict):
            return []
        return [
            parse_track(raw)
            for raw in response.get("items", [])
            if isinstance(raw, dict)
        ]

    async def _call_api(self, method: str, params: dict[str, Any]) -> Any:
        """Call a VK method with retry on rate limiting and server errors."""
        params = {**params, "access_token": self.access_token, "v": self.api_version}

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            retry_delay = self.initial_retry_delay * (2 ** attempt)

            response = await send_request(
                "GET", f"{self.base_url}/{method}", self.timeout, params=params
            )

            if response.status_code >= 500 and not last_attempt:
                LOGGER.warning(
                    "VK server error %s, retrying after %.1fs", response.status_code, retry_delay
                )
                await asyncio.sleep(retry_delay)
                continue

            if response.status_code != 200:
                raise TransportError(f"VK API HTTP error {response.status_code} in {method}")

            data = parse_json(response)
            error = data.get("error") if isinstance(data, dict) else None
            if error:
                code = error.get("error_code")
                if code == RATE_LIMIT_ERROR_CODE and not last_attempt:
                    LOGGER.warning("VK rate limit hit, retrying after %.1fs", retry_delay)
                    await asyncio.sleep(retry_delay)
                    continue
                raise RemoteApiError(
                    f"VK API Error in {method}: {error.get('error_msg', 'unknown error')}",
                    code=code,
                )

            if not isinstance(data, dict) or "response" not in data:
                raise TransportError(f"VK API returned no response for {method}")
            return data["response"]

        raise TransportError(f"VK API call {method} failed after {self.max_retries} attempts")
