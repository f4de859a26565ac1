"""Core visited-domain exports."""

from .overlay import VisitedOverlay
from .session import AuthSession

__all__ = ["AuthSession", "VisitedOverlay"]
