"""
Session configuration.

Timeouts and retry budgets for the protocol sessions. Defaults reflect
what the devices tolerate in practice; every value can be overridden per
session.

Example:
    >>> from budslink.config import SessionConfig
    >>> config = SessionConfig(ack_timeout=2.0)
    >>> config.handshake_retries
    3
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SessionConfig(BaseModel):
    """
    Immutable timing and retry configuration for a session.

    Attributes:
        ack_timeout: Seconds to wait for a Sony V1 acknowledgement.
        ack_timeout_v2: Seconds to wait for a Sony V2 acknowledgement.
        handshake_retries: Extra transmissions allowed for messages that
            expect a reply (handshake and state requests).
        command_retries: Extra transmissions allowed for set commands.
        response_timeout: Seconds per attempt when waiting for a specific
            reply during the handshake.
        response_retries: Attempts when waiting for a specific reply.
        settle_delay: Pause between feature negotiation and the
            notification request (Apple).
        read_chunk_size: Maximum bytes requested per transport read.
    """

    model_config = ConfigDict(frozen=True)

    ack_timeout: float = Field(default=1.25, gt=0, description="Sony V1 ACK timeout (s)")
    ack_timeout_v2: float = Field(default=0.3, gt=0, description="Sony V2 ACK timeout (s)")
    handshake_retries: int = Field(default=3, ge=0, le=10)
    command_retries: int = Field(default=0, ge=0, le=10)
    response_timeout: float = Field(default=5.0, gt=0)
    response_retries: int = Field(default=3, ge=1, le=10)
    settle_delay: float = Field(default=0.25, ge=0)
    read_chunk_size: int = Field(default=1024, ge=1, le=65536)


DEFAULT_SESSION_CONFIG = SessionConfig()
"""Shared default configuration instance."""
