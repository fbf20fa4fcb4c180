"""Building blocks for a workspace chat service."""

__version__ = "0.1.0"

__all__ = [
    "agents",
    "ai",
    "analytics_events",
    "analytics_pb",
    "bot_notify",
    "chat_errors",
    "chat_files",
    "chat_rules",
    "config",
]