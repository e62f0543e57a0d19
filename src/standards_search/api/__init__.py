"""Service layer and HTTP application."""

from .service import StandardsService
from .server import create_app

__all__ = ["StandardsService", "create_app"]
