import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Route collator log records to stderr so stdout stays free for NDJSON output."""
    logging.basicConfig(
        level=level.upper(),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    # httpx logs every request at INFO; one line per page is too noisy here.
    logging.getLogger("httpx").setLevel(logging.WARNING)
