from __future__ import annotations

import json
import logging
import sys

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

_LEVEL_ALIASES = {"warn": "WARNING"}


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        fields = {
            k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS
        }
        return json.dumps({
            "ts": record.created,
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **fields,
            **({"exc": self.formatException(record.exc_info)} if record.exc_info else {}),
        }, default=str)


def resolve_level(level: str) -> int:
    """Map a config level name (``debug``/``info``/``warn``/``error``) to a logging level."""
    name = _LEVEL_ALIASES.get(level.lower(), level.upper())
    return getattr(logging, name, logging.INFO)


def setup_logging(level: str = "info", json_output: bool = False) -> logging.Logger:
    """Configure and return the root agentbridge logger.

    Output goes to stderr; stdout belongs to the MCP stdio transport.
    """
    logger = logging.getLogger("agentbridge")
    logger.setLevel(resolve_level(level))

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stderr)

    if json_output:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        ))

    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger under the agentbridge namespace."""
    return logging.getLogger(f"agentbridge.{name}")
