"""Flashcard review over notebook entries."""

from collections.abc import Sequence

from lingopop.schemas import DictionaryEntry


class FlashcardDeck:
    """Cycle through entries one card at a time, term on the front."""

    def __init__(self, entries: Sequence[DictionaryEntry]) -> None:
        self._entries = list(entries)
        self.index = 0
        self.flipped = False

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def current(self) -> DictionaryEntry:
        if not self._entries:
            raise ValueError("Deck is empty")
        return self._entries[self.index]

    @property
    def position(self) -> tuple[int, int]:
        """1-based position and deck size."""
        return self.index + 1, len(self._entries)

    def flip(self) -> bool:
        """Turn the current card over. Returns True if the back is now showing."""
        self.flipped = not self.flipped
        return self.flipped

    def next(self) -> DictionaryEntry:
        """Advance to the next card (wrapping around), front side up."""
        if not self._entries:
            raise ValueError("Deck is empty")
        self.flipped = False
        self.index = (self.index + 1) % len(self._entries)
        return self._entries[self.index]
