"""Tests for the processed-items ledger and its JSON store."""

import json
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import Mock

import pytest

from vk_relay.adapters.storage import JsonLedgerStore
from vk_relay.core import ProcessedLedger
from vk_relay.errors import PersistenceError


def test_ledger_basic() -> None:
    """Test basic processed tracking."""
    with TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "data" / "processed.json"
        ledger = ProcessedLedger(JsonLedgerStore(path))
        
        # Store is created empty on first use
        assert path.exists()
        assert json.loads(path.read_text()) == []
        
        assert not ledger.is_processed("-1_1")
        
        ledger.mark_processed("-1_1")
        assert ledger.is_processed("-1_1")
        assert "-1_1" in ledger
        assert len(ledger) == 1
        
        # Load from new ledger instance
        ledger2 = ProcessedLedger(JsonLedgerStore(path))
        assert ledger2.is_processed("-1_1")
        assert not ledger2.is_processed("-1_2")


def test_every_mark_rewrites_full_set() -> None:
    with TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "processed.json"
        ledger = ProcessedLedger(JsonLedgerStore(path))
        
        ledger.mark_processed("-1_2")
        ledger.mark_processed("-1_1")
        
        assert sorted(json.loads(path.read_text())) == ["-1_1", "-1_2"]
        assert "-1_1" in ledger and len(ledger) == 2


def test_corrupted_store_refuses_to_load() -> None:
    """A non-empty store that fails to parse must not become an empty ledger."""
    with TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "processed.json"
        path.write_text('["-1_1", ', encoding="utf-8")
        
        with pytest.raises(PersistenceError):
            ProcessedLedger(JsonLedgerStore(path))


def test_store_with_wrong_shape_refuses_to_load() -> None:
    with TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "processed.json"
        path.write_text('{"-1_1": true}', encoding="utf-8")
        
        with pytest.raises(PersistenceError):
            JsonLedgerStore(path).load()


def test_empty_file_is_empty_ledger() -> None:
    with TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "processed.json"
        path.write_text("", encoding="utf-8")
        
        assert JsonLedgerStore(path).load() == set()


def test_persist_failure_keeps_mark_in_memory() -> None:
    """Test that a failed write is logged and the mark still holds."""
    store = Mock()
    store.load.return_value = set()
    store.persist.side_effect = PersistenceError("disk full")
    
    ledger = ProcessedLedger(store)
    ledger.mark_processed("-1_1")
    
    assert ledger.is_processed("-1_1")
    store.persist.assert_called_once()
