"""Persistent notebook of saved dictionary entries, de-duplicated by term."""

import asyncio
import json
import logging
from datetime import date
from typing import Any

from pydantic import TypeAdapter, ValidationError

from lingopop.errors import ImportFormatInvalid
from lingopop.schemas import DictionaryEntry
from lingopop.storage import NOTEBOOK_KEY, LocalStorage

logger = logging.getLogger(__name__)

_entries_adapter = TypeAdapter(list[DictionaryEntry])


def export_filename(day: date | None = None) -> str:
    """Return the backup file name for ``day`` (defaults to today)."""
    return f"lingopop_backup_{(day or date.today()).isoformat()}.json"


def parse_entries(records: Any) -> list[DictionaryEntry]:
    """
    Validate a backup payload as an ordered list of entries.

    Raises:
        ImportFormatInvalid: Payload is not a list, or a record is not entry-shaped
    """
    if not isinstance(records, list):
        raise ImportFormatInvalid(
            f"Expected a list of entries, got {type(records).__name__}"
        )
    try:
        return _entries_adapter.validate_python(records)
    except ValidationError as e:
        raise ImportFormatInvalid(f"Invalid entry in backup: {e.error_count()} error(s)") from e


class NotebookStore:
    """Ordered collection of saved entries keyed by exact term.

    Newest saves come first. Every mutation writes the whole snapshot to
    local storage; mutations and writes are serialized so the last mutation
    is always the last write.
    """

    def __init__(self, storage: LocalStorage, entries: list[DictionaryEntry] | None = None) -> None:
        self._storage = storage
        self._entries: dict[str, DictionaryEntry] = {}
        for entry in entries or []:
            self._entries.setdefault(entry.term, entry)
        self._lock = asyncio.Lock()

    @classmethod
    async def open(cls, storage: LocalStorage) -> "NotebookStore":
        """Load the persisted notebook. A missing or corrupt snapshot loads as empty."""
        raw = await storage.get_item(NOTEBOOK_KEY)
        if raw is None:
            return cls(storage)

        try:
            entries = parse_entries(json.loads(raw))
        except (json.JSONDecodeError, ImportFormatInvalid) as e:
            logger.warning("Ignoring corrupt notebook snapshot: %s", e)
            return cls(storage)

        logger.debug("Loaded %d notebook entries", len(entries))
        return cls(storage, entries)

    @property
    def entries(self) -> list[DictionaryEntry]:
        """Saved entries in display order."""
        return list(self._entries.values())

    def terms(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, term: object) -> bool:
        return term in self._entries

    def is_saved(self, term: str) -> bool:
        return term in self._entries

    def get(self, term: str) -> DictionaryEntry | None:
        return self._entries.get(term)

    def find_by_id(self, entry_id: str) -> DictionaryEntry | None:
        return next((e for e in self._entries.values() if e.id == entry_id), None)

    async def toggle_save(self, entry: DictionaryEntry) -> bool:
        """
        Save ``entry`` or, if its term is already saved, remove it.

        Returns:
            True if the entry was saved, False if it was removed
        """
        async with self._lock:
            if entry.term in self._entries:
                del self._entries[entry.term]
                saved = False
            else:
                self._entries = {entry.term: entry.model_copy(), **self._entries}
                saved = True
            await self._persist()

        logger.info("%s '%s'", "Saved" if saved else "Removed", entry.term)
        return saved

    async def delete(self, entry_id: str) -> bool:
        """Remove the entry with ``entry_id``. Returns False if there is none."""
        async with self._lock:
            entry = self.find_by_id(entry_id)
            if entry is None:
                return False
            del self._entries[entry.term]
            await self._persist()

        logger.info("Deleted '%s' (%s)", entry.term, entry_id)
        return True

    async def import_merge(self, records: Any) -> int:
        """
        Merge backup records into the notebook. Existing terms win.

        New entries are placed ahead of the existing ones, keeping their
        incoming order; within the batch the first occurrence of a term wins.

        Returns:
            Number of entries added

        Raises:
            ImportFormatInvalid: The payload is malformed; the notebook is unchanged
        """
        incoming = parse_entries(records)

        async with self._lock:
            new_items: dict[str, DictionaryEntry] = {}
            for entry in incoming:
                if entry.term not in self._entries and entry.term not in new_items:
                    new_items[entry.term] = entry

            if new_items:
                self._entries = {**new_items, **self._entries}
                await self._persist()

        logger.info(
            "Imported %d of %d entries (%d already present)",
            len(new_items),
            len(incoming),
            len(incoming) - len(new_items),
        )
        return len(new_items)

    async def import_json(self, text: str) -> int:
        """
        Merge a backup document (as produced by :meth:`export`).

        Raises:
            ImportFormatInvalid: The document is not valid JSON or not entry-shaped
        """
        try:
            records = json.loads(text)
        except json.JSONDecodeError as e:
            raise ImportFormatInvalid(f"Backup is not valid JSON: {e}") from e
        return await self.import_merge(records)

    def export(self) -> str:
        """Serialize the notebook as a JSON backup document."""
        return json.dumps(
            [entry.to_record() for entry in self._entries.values()],
            indent=2,
            ensure_ascii=False,
        )

    async def _persist(self) -> None:
        await self._storage.set_item(NOTEBOOK_KEY, self.export())
