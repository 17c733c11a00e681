"""ADK backend for human-in-the-loop approvals and support triage demos."""

__version__ = "0.1.0"
