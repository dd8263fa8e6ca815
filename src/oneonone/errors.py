"""Error types for the 1:1 notes engine.

The review core itself never raises on well-typed input. These exceptions
mark the seams with collaborators: extraction payloads, entry updates,
the briefing service, and configuration.
"""


class OneOnOneError(Exception):
    """Base exception for 1:1 notes errors."""

    pass


class ExtractionError(OneOnOneError):
    """Raised when an extraction response contains no usable JSON object."""

    def __init__(self, message: str, response_text: str = "") -> None:
        """Initialize extraction error.

        Args:
            message: Error message.
            response_text: Raw response that failed to parse.
        """
        super().__init__(message)
        self.response_text = response_text


class ActionItemError(OneOnOneError):
    """Raised when an action item reference does not match its entry."""

    pass


class BriefingUnavailableError(OneOnOneError):
    """Raised when the briefing service cannot produce a prep payload."""

    def __init__(self, message: str, member_id: str | None = None) -> None:
        """Initialize briefing error.

        Args:
            message: Error message.
            member_id: Team member the briefing was requested for.
        """
        super().__init__(message)
        self.member_id = member_id


class ConfigError(OneOnOneError):
    """Raised when configuration values are invalid."""

    pass


__all__ = [
    "ActionItemError",
    "BriefingUnavailableError",
    "ConfigError",
    "ExtractionError",
    "OneOnOneError",
]
