"""errors.py

Exception taxonomy for the topology client.

Outcomes that are not failures (no route, duplicate edge, edge not found) are
reported as return values, not raised.
"""

from __future__ import annotations

from typing import Optional


class TopologyClientError(Exception):
    """Base class for every error raised by the client."""


class ValidationError(TopologyClientError):
    """Operator input is missing or malformed. The remote is never called."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class SelfLoopError(ValidationError):
    """An edge was requested between a node and itself."""


class TransportError(TopologyClientError):
    """A remote call failed. ``message`` is the service/transport text verbatim."""

    def __init__(self, command: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.command = command
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class LoadError(TopologyClientError):
    """The initial topology fetch failed; nothing was installed in the mirror."""


class UnknownEndpoint(TopologyClientError):
    """An edge references a node the mirror does not know about."""

    def __init__(self, node_id: str):
        super().__init__(f"Unknown endpoint '{node_id}'")
        self.node_id = node_id
