"""
openid_association/logger.py - Package logging.

The library only attaches a NullHandler to its root logger, so importing it
never writes to stderr or changes the host's logging setup. Applications
that want the JSON-line output call enable_json_logging() once.

    from openid_association import enable_json_logging
    enable_json_logging(logging.DEBUG)
"""

import json
import logging
import sys
import time

ROOT_LOGGER_NAME = "openid_association"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record: ts (UTC), level, name, msg."""

    converter = time.gmtime

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%SZ")

    def format(self, record):
        entry = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def get_logger(name=ROOT_LOGGER_NAME):
    """Logger under the package namespace. Names outside it are nested."""
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(ROOT_LOGGER_NAME).getChild(name)


def enable_json_logging(level=logging.INFO, stream=None):
    """Install a JSON-line handler on the package root logger.

    Calling it again replaces the previously installed handler rather than
    adding a second one. Returns the handler so callers can remove it.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in list(root.handlers):
        if isinstance(existing.formatter, JsonLineFormatter):
            root.removeHandler(existing)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(JsonLineFormatter())
    root.addHandler(handler)
    root.setLevel(level)
    return handler
