"""LingoPop: AI-enriched dictionary lookups with a personal notebook."""

__version__ = "0.1.0"
