"""
Session factory.

Picks the vendor session matching a capability record, so callers only
need the record returned by the capability registry.
"""

from __future__ import annotations

from budslink.callbacks import DeviceCallbacks
from budslink.config import DEFAULT_SESSION_CONFIG, SessionConfig
from budslink.exceptions import UnknownModelError
from budslink.models.capabilities import (
    AppleCapabilities,
    CapabilityRecord,
    SamsungCapabilities,
    SonyCapabilities,
)
from budslink.scheduling import Scheduler
from budslink.sessions.apple import AppleSession
from budslink.sessions.base import SendFunction, Session
from budslink.sessions.samsung import SamsungSession
from budslink.sessions.sony import SonySession


def create_session(
    capabilities: CapabilityRecord,
    send: SendFunction,
    callbacks: DeviceCallbacks | None = None,
    scheduler: Scheduler | None = None,
    config: SessionConfig = DEFAULT_SESSION_CONFIG,
) -> Session:
    """
    Create the protocol session for a model.

    Args:
        capabilities: Capability record of the connected model.
        send: Called with every outbound wire frame.
        callbacks: Event sink.
        scheduler: Timer source. Defaults to the running event loop.
        config: Timeouts and retry budgets.

    Returns:
        A session in the CONNECTING state.

    Raises:
        UnknownModelError: If the record belongs to no supported vendor.

    Example:
        >>> from budslink.capabilities.samsung import GALAXY_BUDS2
        >>> from budslink.scheduling import VirtualScheduler
        >>> create_session(GALAXY_BUDS2, lambda data: None, scheduler=VirtualScheduler())
        SamsungSession(model='Galaxy Buds 2', state=CONNECTING)
    """
    if isinstance(capabilities, SonyCapabilities):
        return SonySession(capabilities, send, callbacks, scheduler, config)
    if isinstance(capabilities, SamsungCapabilities):
        return SamsungSession(capabilities, send, callbacks, scheduler, config)
    if isinstance(capabilities, AppleCapabilities):
        return AppleSession(capabilities, send, callbacks, scheduler, config)
    raise UnknownModelError(capabilities.model_id)
