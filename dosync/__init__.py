"""Health checks, logging and rolling-update management for Docker Compose services."""

__version__ = "0.1.0"