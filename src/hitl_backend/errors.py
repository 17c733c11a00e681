"""Error types raised by the approval protocol adapters."""

from __future__ import annotations


class ProtocolError(ValueError):
    """A client or agent message violates the approval tool-call protocol."""
