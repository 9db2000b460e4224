"""Error taxonomy for the wind data pipeline.

None of these escape `WindDataOrchestrator.fetch()`; they mark which fallback
branch a failure belongs to.
"""


class WindWidgetError(Exception):
    """Base class for wind widget errors."""


class NetworkError(WindWidgetError):
    """Connection-level failure that survived every retry."""

    def __init__(self, message: str, *, attempts: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts


class ApplicationError(WindWidgetError):
    """The API answered, but with a non-zero code or a body we cannot use."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        super().__init__(message)
        self.code = code


class ConfigurationError(WindWidgetError):
    """Credentials are missing or incomplete."""
