"""Gateway port - The transport the host application provides.

The engine performs no I/O. Hosts implement this port with their HTTP
client, credentials and retry policy.
"""

from __future__ import annotations

from typing import Protocol


class PriceGatewayPort(Protocol):
    """Port for submitting a serialized price request."""

    def submit(self, payload: bytes) -> bytes:
        """Send ``payload`` and return the raw response body."""
        ...
