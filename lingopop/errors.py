"""Exception hierarchy shared across LingoPop services."""


class LingoPopError(Exception):
    """Base class for all LingoPop errors."""


class ConfigError(LingoPopError):
    """Raised when required configuration (the Gemini API key) is missing."""


class GatewayError(LingoPopError):
    """Raised when a request to the Gemini service fails."""


class LookupFailed(GatewayError):
    """Raised when the text phase of a lookup fails (network, API or schema error)."""


class ImagePhaseFailed(GatewayError):
    """Raised when illustrative image generation fails. Never fatal to a lookup."""


class PlaybackFailed(LingoPopError):
    """Raised when speech audio cannot be decoded or sent to the output device."""


class AudioDecodeError(PlaybackFailed):
    """Raised when a PCM payload is malformed."""


class ImportFormatInvalid(LingoPopError):
    """Raised when a notebook backup does not have the expected shape."""
