"""
API module - HTTP surface for the advisor.

Provides:
- APIService: framework-agnostic business logic
- create_app(): FastAPI application factory
"""

from .service import APIService
from .app import create_app

__all__ = ["APIService", "create_app"]
