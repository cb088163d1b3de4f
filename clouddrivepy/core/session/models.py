"""
Session data models.

Contains the immutable authorization context shared by every component.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class AuthorizedContext:
    """
    Authorization context bound after a successful login.

    Immutable: safe to share between components and concurrent tasks.

    Attributes:
        address: Normalized server address (host:port)
        username: Account the token was issued to
        token: Bearer token returned by the server
        expires_at: Token expiration, if the server reported one
        extra_metadata: Additional call metadata from configuration
    """
    address: str
    username: str
    token: str = field(repr=False)
    expires_at: Optional[datetime] = None
    extra_metadata: Tuple[Tuple[str, str], ...] = ()

    @property
    def authorization(self) -> str:
        """Value of the authorization header."""
        return f"Bearer {self.token}"

    @property
    def metadata(self) -> Tuple[Tuple[str, str], ...]:
        """gRPC call metadata carrying the token."""
        return (('authorization', self.authorization),) + self.extra_metadata

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        Check whether the token has passed its reported expiration.

        Args:
            now: Reference time (defaults to the current time in the
                 expiration's timezone)
        """
        if self.expires_at is None:
            return False
        now = now or datetime.now(self.expires_at.tzinfo)
        return now >= self.expires_at

    def to_dict(self) -> dict:
        """
        Convert to dictionary for display. The token is never included.
        """
        return {
            'address': self.address,
            'username': self.username,
            'expires_at': self.expires_at.isoformat() if self.expires_at else None,
        }
