"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from typing import Optional

from vk_relay.core.entities import AudioTrack, SourceItem


class FeedClient(ABC):
    """Interface for the social feed the posts come from."""
    
    @abstractmethod
    async def fetch_items(self, count: int, offset: int = 0) -> list[SourceItem]:
        """Fetch the newest items, newest first."""
        pass
    
    @abstractmethod
    async def lookup_candidates(self, query: str) -> list[AudioTrack]:
        """Search audio tracks matching a free-text query."""
        pass


class ChannelClient(ABC):
    """Interface for the destination channel."""
    
    @abstractmethod
    async def send_text(self, text: str) -> int:
        pass
    
    @abstractmethod
    async def send_photo(self, url: str, caption: str = "") -> int:
        pass
    
    @abstractmethod
    async def send_album(self, urls: list[str], caption: str = "") -> list[int]:
        """Send several photos as one album. Caption goes on the first photo."""
        pass
    
    @abstractmethod
    async def send_animation(self, url: str, caption: str = "") -> int:
        pass
    
    @abstractmethod
    async def send_audio(
        self,
        url: str,
        caption: str = "",
        title: Optional[str] = None,
        performer: Optional[str] = None,
        duration: Optional[int] = None,
    ) -> int:
        pass
    
    @abstractmethod
    async def send_document(self, url: str, caption: str = "") -> int:
        pass


class LedgerStore(ABC):
    """Durable set of processed item keys."""
    
    @abstractmethod
    def load(self) -> set[str]:
        """Load every persisted key. Creates an empty store when absent."""
        pass
    
    @abstractmethod
    def persist(self, keys: set[str]) -> None:
        """Replace the persisted set with ``keys``."""
        pass
