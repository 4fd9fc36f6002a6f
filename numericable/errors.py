"""Error taxonomy of a konnector run.

Only two terminal codes ever leave a run: ``LOGIN_FAILED`` and
``UNKNOWN_ERROR``. Lower level failures (network errors, missing form fields,
rejected credentials) are wrapped into one of them at the boundary where they
happen, and the original exception is kept as ``__cause__`` for the logs.
"""

LOGIN_FAILED = "LOGIN_FAILED"
UNKNOWN_ERROR = "UNKNOWN_ERROR"


class KonnectorError(Exception):
    """Base class for errors that terminate a run."""

    code: str = UNKNOWN_ERROR


class LoginFailed(KonnectorError):
    """App key or access token could not be obtained."""

    code = LOGIN_FAILED


class UnknownError(KonnectorError):
    """Any failure after the credentials were accepted."""

    code = UNKNOWN_ERROR


class ScrapingError(ValueError):
    """A required element is missing from a fetched page."""
