"""
Logging setup for the Lambda entrypoint and the local API server.
"""

import logging
import sys

_AWS_SDK_LOGGERS = ("boto3", "botocore", "urllib3")


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging; AWS SDK loggers stay at WARNING unless debugging."""
    root_level = logging.getLevelName(level.upper())
    logging.basicConfig(
        level=root_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    sdk_level = root_level if root_level == logging.DEBUG else logging.WARNING
    for name in _AWS_SDK_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)


__all__ = ["configure_logging"]
