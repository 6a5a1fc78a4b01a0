"""stackcast -- stack-aware authentication scaffolding for web projects."""

__version__ = "0.3.0"
