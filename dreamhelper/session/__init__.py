"""Session management - in-memory advisor sessions."""

from .manager import Session, SessionManager

__all__ = ["Session", "SessionManager"]
