"""Remote-data access and offline-cache layer for a Firefly III client."""

__version__ = "0.1.0"
