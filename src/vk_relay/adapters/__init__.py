"""Adapters for the remote services and the ledger store."""
