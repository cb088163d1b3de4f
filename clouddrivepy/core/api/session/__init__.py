"""Authenticated session (channel + authorization context) lifecycle."""
from .session_manager import Session

__all__ = [
    'Session',
]
