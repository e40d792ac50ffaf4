"""Aggregate state stored as a single JSON file on disk."""

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from nutrition_journal.services.storage import StateRepository

_logger = logging.getLogger(__name__)


@dataclass
class LocalStateRepository(StateRepository):
    """JSON file implementation of the aggregate store."""

    path: Path

    async def load_state(self) -> dict[str, object]:
        """Return the stored object, or an empty one when nothing is stored."""
        return await asyncio.to_thread(self._read)

    async def save_state(self, state: dict[str, object]) -> None:
        """Write the state through a temporary file and rename it into place."""
        await asyncio.to_thread(self._write, state)

    def _read(self) -> dict[str, object]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf8") as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            _logger.warning("State file %s does not hold an object", self.path)
            return {}
        return data

    def _write(self, state: dict[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with temp_path.open("w", encoding="utf8") as handle:
            json.dump(state, handle, indent=2)
        temp_path.replace(self.path)
