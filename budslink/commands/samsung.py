"""
Samsung Galaxy Buds command builders.

Builders return (message id, payload) pairs; the session frames them
with its codec. Commands for features the model lacks return None.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from budslink.models.capabilities import SamsungCapabilities
from budslink.protocol.samsung_constants import MessageId, NoiseControlMode

logger = logging.getLogger(__name__)


class SamsungCommand(NamedTuple):
    """Message id and payload of an outbound request."""

    msg_id: MessageId
    payload: bytes = b""


def status_request() -> SamsungCommand:
    """
    Ask the buds for a status update.

    Example:
        >>> status_request()
        SamsungCommand(msg_id=<MessageId.STATUS_UPDATED: 96>, payload=b'')
    """
    return SamsungCommand(MessageId.STATUS_UPDATED)


def set_anc_mode(caps: SamsungCapabilities, mode: NoiseControlMode) -> SamsungCommand | None:
    """
    Build the noise controls command.

    Args:
        caps: Capability record of the connected model.
        mode: Target mode.

    Returns:
        The command, or None if the model has no noise control or
        does not accept the mode.
    """
    if not caps.anc_supported:
        return None
    if mode not in caps.anc_modes:
        logger.debug("%s does not support noise control mode %s", caps.display_name, mode.name)
        return None
    return SamsungCommand(MessageId.NOISE_CONTROLS, bytes([mode]))
