"""
Error taxonomy for the extraction pipeline.

Failures with a fallback (anything under `AIExtractionError`) are handled by
the orchestrator; the rest propagate to the HTTP layer. An empty extraction is
not an error and has no exception class.
"""


class TimetableExtractionError(Exception):
    """Base class for every pipeline failure.

    `warnings` carries notices from earlier stages of the same run (e.g. a
    failed AI attempt) so the caller can show them alongside the error.
    """

    def __init__(self, message: str = "", warnings=None):
        super().__init__(message)
        self.warnings = list(warnings or [])


class ConfigurationError(TimetableExtractionError):
    """AI credential missing or still set to the placeholder."""


class UnsupportedFormatError(TimetableExtractionError):
    """Input cannot be handled by the selected path (e.g. PDF without AI)."""


class RecognitionUnavailableError(TimetableExtractionError):
    """No optical recognition engine is installed."""


class AIExtractionError(TimetableExtractionError):
    """The vision model could not produce a usable answer."""


class MalformedResponseError(AIExtractionError):
    """Reply was not JSON or lacked the `days` array."""


class NetworkError(AIExtractionError):
    """Transport or HTTP failure talking to the vision model."""
