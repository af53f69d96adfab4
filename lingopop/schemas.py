"""Pydantic models for dictionary entries, lookups and chat messages."""

import uuid
from datetime import datetime, timezone
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def new_entry_id() -> str:
    """Return a fresh opaque identifier."""
    return uuid.uuid4().hex


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys (the backup file format)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DictionaryExample(CamelModel):
    """An example sentence with its translation."""

    original: str
    translation: str


class LookupResponse(CamelModel):
    """Structured text returned by the lookup prompt."""

    definition: str
    examples: list[DictionaryExample] = Field(default_factory=list)
    fun_explanation: str


class DictionaryEntry(CamelModel):
    """An enriched dictionary entry for one looked-up term.

    Entries are immutable; the image patch produces a new copy via
    :meth:`with_image`. Backups from older releases used ``imageUrl`` and a
    millisecond ``timestamp``, both still accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=new_entry_id, min_length=1)
    term: str = Field(min_length=1)
    definition: str
    examples: list[DictionaryExample] = Field(default_factory=list)
    fun_explanation: str = ""
    image_data: str | None = Field(
        default=None,
        validation_alias=AliasChoices("imageData", "imageUrl", "image_data"),
    )
    created_at: datetime = Field(
        default_factory=_utc_now,
        validation_alias=AliasChoices("createdAt", "timestamp", "created_at"),
    )

    @classmethod
    def from_lookup(cls, term: str, response: LookupResponse) -> "DictionaryEntry":
        """Build a new image-less entry from a lookup response."""
        return cls(
            term=term,
            definition=response.definition,
            examples=response.examples,
            fun_explanation=response.fun_explanation,
        )

    @property
    def has_image(self) -> bool:
        return bool(self.image_data)

    def with_image(self, image_data: str) -> "DictionaryEntry":
        """Return a copy of this entry carrying ``image_data``."""
        return self.model_copy(update={"image_data": image_data})

    def to_record(self) -> dict[str, object]:
        """Serialize to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class ChatMessage(BaseModel):
    """A single message in a tutor chat transcript."""

    id: str = Field(default_factory=new_entry_id)
    role: Literal["user", "assistant"]
    text: str
