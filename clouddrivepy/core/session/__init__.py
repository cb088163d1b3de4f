"""
Session models.

The authorization context produced by login and shared, read-only, by
every component.
"""
from .models import AuthorizedContext

__all__ = [
    'AuthorizedContext',
]
