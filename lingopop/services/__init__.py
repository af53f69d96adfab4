"""Services for lookups, the notebook, chat and stories."""

from lingopop.services.chat import ChatSession
from lingopop.services.flashcards import FlashcardDeck
from lingopop.services.gemini import GeminiGateway, create_gateway
from lingopop.services.lookup import LookupOrchestrator
from lingopop.services.notebook import NotebookStore
from lingopop.services.story import generate_story

__all__ = [
    "ChatSession",
    "FlashcardDeck",
    "GeminiGateway",
    "LookupOrchestrator",
    "NotebookStore",
    "create_gateway",
    "generate_story",
]
