"""Logging setup shared by the CLI and scripts."""
import logging
import sys

from numericable.config import config
from numericable.parse.redact import redact_string

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class RedactingFilter(logging.Filter):
    """Masks secrets in every record, third-party loggers included."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact_string(record.getMessage())
        record.args = ()
        return True


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger with a single stderr handler."""
    root = logging.getLogger()
    root.setLevel((level or config.LOG_LEVEL).upper())

    # Avoid duplicated lines when called twice (CLI + scripts)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    # httpx logs request URLs, the token redemption one carries accessToken
    handler.addFilter(RedactingFilter())
    root.addHandler(handler)

    # httpx logs every request at INFO, keep it for --debug only
    logging.getLogger("httpx").setLevel(logging.WARNING if root.level > logging.DEBUG else logging.DEBUG)
