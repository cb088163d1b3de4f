"""
API configuration module.

Provides configuration for the CloudDrive gRPC client.
Open for extension through custom configurations.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Tuple, Any
from urllib.parse import urlsplit

import grpc


def normalize_address(address: str) -> str:
    """
    Normalize a server address to the ``host:port`` form gRPC dials.

    Accepts a bare ``host:port`` or a URL-like ``http(s)://host:port/path``.

    Args:
        address: Server address as given by the user

    Returns:
        Address without scheme or path

    Raises:
        ValueError: If the address is empty
    """
    dial_address = (address or '').strip()
    if not dial_address:
        raise ValueError("Server address is empty")

    if dial_address.startswith(('http://', 'https://')):
        parts = urlsplit(dial_address)
        if parts.netloc:
            dial_address = parts.netloc

    return dial_address


def is_tls_address(address: str) -> bool:
    """Returns True if the address explicitly asks for TLS."""
    return (address or '').strip().startswith('https://')


@dataclass
class SSLConfig:
    """
    SSL/TLS configuration.

    The server normally listens in plaintext; enable TLS when it sits
    behind a terminating proxy.
    """
    enabled: bool = False
    ca_file: Optional[str] = None
    cert_file: Optional[str] = None
    key_file: Optional[str] = None

    def create_credentials(self) -> Optional[grpc.ChannelCredentials]:
        """Create gRPC channel credentials, or None for a plaintext channel."""
        if not self.enabled:
            return None

        root_certificates = _read_optional(self.ca_file)
        private_key = _read_optional(self.key_file)
        certificate_chain = _read_optional(self.cert_file)

        return grpc.ssl_channel_credentials(
            root_certificates=root_certificates,
            private_key=private_key,
            certificate_chain=certificate_chain
        )


def _read_optional(path: Optional[str]) -> Optional[bytes]:
    if not path:
        return None
    with open(path, 'rb') as f:
        return f.read()


@dataclass
class TimeoutConfig:
    """
    Timeout configuration.

    Only the credential exchange is bounded by default; every other call
    waits for the server.
    """
    login: float = 5.0  # Token exchange timeout
    call: Optional[float] = None  # Per-call deadline (None = no deadline)


@dataclass
class ChannelConfig:
    """gRPC channel tuning."""
    max_receive_message_length: int = 64 * 1024 * 1024
    max_send_message_length: int = 64 * 1024 * 1024
    keepalive_time_ms: Optional[int] = None

    def to_grpc_options(self) -> List[Tuple[str, Any]]:
        """Convert to gRPC channel options."""
        options = [
            ('grpc.max_receive_message_length', self.max_receive_message_length),
            ('grpc.max_send_message_length', self.max_send_message_length),
        ]
        if self.keepalive_time_ms:
            options.append(('grpc.keepalive_time_ms', self.keepalive_time_ms))
        return options


@dataclass
class APIConfig:
    """
    Complete API configuration.

    Centralizes all configuration options for the CloudDrive API client.
    """
    # User agent (sent as gRPC primary user agent)
    user_agent: str = 'clouddrivepy/1.0.0'

    # Sub-configurations
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    channel: ChannelConfig = field(default_factory=ChannelConfig)

    # Additional metadata attached to every authorized call
    extra_metadata: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def default(cls) -> 'APIConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def secure(cls, ca_file: Optional[str] = None, **kwargs) -> 'APIConfig':
        """Create configuration with TLS enabled."""
        return cls(
            ssl=SSLConfig(enabled=True, ca_file=ca_file),
            **kwargs
        )

    def get_channel_options(self) -> List[Tuple[str, Any]]:
        """Get options for the gRPC channel."""
        return [
            ('grpc.primary_user_agent', self.user_agent),
            *self.channel.to_grpc_options(),
        ]
