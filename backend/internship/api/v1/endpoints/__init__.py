# API endpoints
from . import health, submissions

__all__ = ["health", "submissions"]
