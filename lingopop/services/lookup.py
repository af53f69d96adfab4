"""Two-phase lookup: publish the text entry first, patch in the image later."""

import asyncio
import logging
from collections.abc import Callable

from lingopop.config import settings
from lingopop.errors import ImagePhaseFailed
from lingopop.schemas import DictionaryEntry
from lingopop.services.gemini import GeminiGateway

logger = logging.getLogger(__name__)

EntryListener = Callable[[DictionaryEntry], None]


class LookupOrchestrator:
    """Owns the current lookup result and reconciles late image results.

    Only the most recently published entry may receive an image. Each image
    task captures the id of the entry it was started for and its result is
    dropped if that id is no longer the active one. In-flight requests are
    never cancelled.
    """

    def __init__(self, gateway: GeminiGateway) -> None:
        self.gateway = gateway
        self.loading = False
        self._current: DictionaryEntry | None = None
        self._active_id: str | None = None
        self._listeners: list[EntryListener] = []
        self._image_tasks: set[asyncio.Task[None]] = set()
        self._generation = 0

    @property
    def current(self) -> DictionaryEntry | None:
        """The currently displayed entry, if any."""
        return self._current

    @property
    def active_id(self) -> str | None:
        """Id of the only entry allowed to receive an image, if any."""
        return self._active_id

    def add_listener(self, listener: EntryListener) -> None:
        """Register a callback invoked on every publish and image patch."""
        self._listeners.append(listener)

    def _publish(self, entry: DictionaryEntry) -> None:
        self._current = entry
        for listener in self._listeners:
            listener(entry)

    async def lookup(
        self,
        term: str,
        native_lang: str | None = None,
        target_lang: str | None = None,
        model: str | None = None,
    ) -> DictionaryEntry:
        """
        Look up a term and publish the text result immediately.

        The illustration is requested in the background and patched onto
        ``current`` when it arrives, if this entry is still the active one.

        If a newer lookup starts before this one's text arrives, the result
        is returned but not published and no image is requested for it.

        Returns:
            The entry built from the text result (without image data)

        Raises:
            LookupFailed: The text phase failed; nothing is published
            ConfigError: No API key is configured
        """
        native_lang = native_lang or settings.native_lang
        target_lang = target_lang or settings.target_lang
        model = model or settings.text_model

        # A new query orphans any pending image and any older text request
        self._generation += 1
        generation = self._generation
        self._current = None
        self._active_id = None
        self.loading = True

        try:
            response = await self.gateway.lookup(term, native_lang, target_lang, model)
        finally:
            if generation == self._generation:
                self.loading = False

        entry = DictionaryEntry.from_lookup(term, response)
        if generation != self._generation:
            logger.debug("Dropping superseded lookup result for '%s'", term)
            return entry

        self._active_id = entry.id
        self._publish(entry)
        logger.info("Published entry %s for '%s'", entry.id, term)

        task = asyncio.create_task(self._fetch_image(entry.id, term, model))
        self._image_tasks.add(task)
        task.add_done_callback(self._image_tasks.discard)

        return entry

    async def _fetch_image(self, entry_id: str, term: str, model: str) -> None:
        """Request the illustration and apply it only if ``entry_id`` is still active."""
        try:
            image_data = await self.gateway.generate_image(term, model)
        except ImagePhaseFailed as e:
            logger.warning("Image generation failed for '%s': %s", term, e)
            return
        except Exception:
            logger.exception("Unexpected error generating image for '%s'", term)
            return

        if not image_data:
            logger.info("No image returned for '%s'", term)
            return

        if self._active_id != entry_id or self._current is None:
            logger.debug("Discarding stale image for '%s' (entry %s)", term, entry_id)
            return

        self._publish(self._current.with_image(image_data))
        logger.info("Attached image to entry %s for '%s'", entry_id, term)

    @property
    def pending_images(self) -> int:
        """Number of image requests still in flight."""
        return len(self._image_tasks)

    async def wait_for_images(self) -> None:
        """Wait until all in-flight image requests have completed."""
        if self._image_tasks:
            await asyncio.gather(*self._image_tasks, return_exceptions=True)
