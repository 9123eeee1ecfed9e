"""JSON file backend for the processed-items ledger."""

import json
import logging
import os
import tempfile
from pathlib import Path

from vk_relay.core import LedgerStore
from vk_relay.errors import PersistenceError

LOGGER = logging.getLogger(__name__)


class JsonLedgerStore(LedgerStore):
    """Store processed keys as a JSON list in a single file.

    The list is sorted on write for stable diffs; readers must not rely on
    the order.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> set[str]:
        """Load keys, creating an empty store on first use.

        An existing file that cannot be parsed raises PersistenceError rather
        than being treated as empty.
        """
        try:
            if not self.path.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text("[]", encoding="utf-8")
                LOGGER.info("Created empty ledger at %s", self.path)
                return set()

            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Cannot read ledger {self.path}: {e}") from e

        if not content.strip():
            return set()

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Ledger {self.path} is corrupted: {e}") from e

        if not isinstance(data, list) or not all(isinstance(key, str) for key in data):
            raise PersistenceError(f"Ledger {self.path} must contain a JSON list of strings")

        return set(data)

    def persist(self, keys: set[str]) -> None:
        """Rewrite the whole file atomically."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(sorted(keys), f, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Cannot write ledger {self.path}: {e}") from e
