"""Logging setup for Meterline.

Exposes a module-level ``logger`` (a ``ContextualLogger``) that the rest of the
codebase imports. Contextual loggers carry structured dimensions such as
``company_id`` or ``request_id``; ``with_context()`` derives a child logger
with extra dimensions without mutating the parent.

Usage:
    from meterline.core.logging import logger

    log = logger.with_context(company_id=company_id, resource_type="api_calls")
    log.info("Usage admitted")
"""

import logging
import sys
from typing import Any, MutableMapping, Optional

from meterline.core.config import settings

_ROOT_LOGGER_NAME = "meterline"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that renders context dimensions into every record.

    Dimensions are also attached to ``record.dimensions`` so handlers that
    ship structured logs can pick them up.
    """

    def __init__(self, logger: logging.Logger, dimensions: Optional[dict[str, Any]] = None):
        """Wrap *logger* with an immutable set of dimensions."""
        super().__init__(logger, {})
        self.dimensions: dict[str, Any] = dict(dimensions or {})

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a child logger with *dimensions* merged over the current ones."""
        merged = {**self.dimensions, **{k: v for k, v in dimensions.items() if v is not None}}
        return ContextualLogger(self.logger, merged)

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        """Prefix the message with the context dimensions."""
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("dimensions", self.dimensions)
        kwargs["extra"] = extra
        if self.dimensions:
            rendered = " ".join(f"{k}={v}" for k, v in self.dimensions.items())
            msg = f"[{rendered}] {msg}"
        return msg, kwargs


class LoggerConfigurator:
    """Configures the ``meterline`` logger hierarchy once per process."""

    _configured = False

    @classmethod
    def configure(cls, level: Optional[str] = None) -> logging.Logger:
        """Attach a stdout handler and set the level. Idempotent."""
        base = logging.getLogger(_ROOT_LOGGER_NAME)
        if not cls._configured:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(_FORMAT))
            base.addHandler(handler)
            cls._configured = True
        base.setLevel(level or settings.LOG_LEVEL)
        return base


logger = ContextualLogger(LoggerConfigurator.configure())
