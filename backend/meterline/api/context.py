"""HTTP API request context.

Carries the request ID and a logger bound to it. Only the API layer creates
these via deps.get_context().
"""

from dataclasses import dataclass

from meterline.core.logging import ContextualLogger


@dataclass
class ApiContext:
    """Per-request context injected into endpoints via Depends()."""

    request_id: str
    logger: ContextualLogger
