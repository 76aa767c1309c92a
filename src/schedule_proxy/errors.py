"""Error hierarchy for schedule fetching.

Transient failures (timeouts, a dead browser) may succeed if the client asks
again; permanent ones will not. None of them are retried automatically and
none are cached, so the next identical request always re-attempts a fetch.

The HTTP layer maps MissingParameterError to 400 and every other
ScrapingError to a generic 500.
"""


class ScrapingError(Exception):
    """Base exception for all schedule fetching errors."""

    pass


class TransientError(ScrapingError):
    """Temporary failure that may succeed on a later request."""

    pass


class NavigationTimeoutError(TransientError):
    """The portal page did not reach network idle within the navigation timeout."""

    pass


class BrowserUnavailableError(TransientError):
    """The browser process is dead, unlaunched, or could not be relaunched."""

    pass


class PermanentError(ScrapingError):
    """Failure that won't succeed on retry."""

    pass


class ScheduleNotFoundError(PermanentError):
    """The rendered page holds no parseable ``week`` document."""

    pass


class MissingParameterError(ScrapingError, ValueError):
    """A required query parameter (``type`` or ``value``) is missing.

    Client-caused; surfaces as HTTP 400.
    """

    pass
