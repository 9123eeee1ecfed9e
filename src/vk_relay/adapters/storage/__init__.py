"""Ledger store adapters."""

from vk_relay.adapters.storage.json_ledger_store import JsonLedgerStore

__all__ = ["JsonLedgerStore"]
