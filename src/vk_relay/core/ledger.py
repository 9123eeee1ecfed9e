"""Ledger of already relayed items to avoid duplicates."""

import logging

from vk_relay.core.interfaces import LedgerStore
from vk_relay.errors import PersistenceError

LOGGER = logging.getLogger(__name__)


class ProcessedLedger:
    """In-memory set of processed item keys backed by a durable store.
    
    The whole set is loaded once on construction. Every mark rewrites the full
    set through the store, which is O(n) per item; fine at a few posts per poll.
    Load errors propagate: starting with an empty ledger over a store that
    could not be read would relay the whole feed again.
    """
    
    def __init__(self, store: LedgerStore) -> None:
        self.store = store
        self._keys: set[str] = set(store.load())
        LOGGER.info("Loaded %d processed posts from storage", len(self._keys))
    
    def is_processed(self, key: str) -> bool:
        """Check if item was already processed."""
        return key in self._keys
    
    def mark_processed(self, key: str) -> None:
        """Mark item as processed and persist the full set.
        
        A failed write is logged; the mark still holds for this process.
        """
        self._keys.add(key)
        try:
            self.store.persist(self._keys)
        except PersistenceError as e:
            LOGGER.error("Could not persist processed mark for %s: %s", key, e)
    
    def __contains__(self, key: object) -> bool:
        return key in self._keys
    
    def __len__(self) -> int:
        return len(self._keys)
