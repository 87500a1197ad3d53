"""
Samsung Galaxy Buds protocol session.

The buds push status on their own once asked; there is no handshake
beyond the first status request and no acknowledgement layer:

    start()  -> STATUS_UPDATED request, state AWAITING_INITIAL_STATE
    first status (0x60) or extended status (0x61) frame -> STEADY
"""

from __future__ import annotations

import logging

from budslink.commands import samsung as commands
from budslink.commands.samsung import SamsungCommand
from budslink.models.capabilities import SamsungCapabilities
from budslink.models.state import SamsungState
from budslink.parsers.samsung import decode_frame
from budslink.protocol.frames import Frame
from budslink.protocol.samsung_codec import SamsungFrameCodec
from budslink.protocol.samsung_constants import MessageId, NoiseControlMode
from budslink.sessions.base import Session, SessionState

logger = logging.getLogger(__name__)

_STATUS_IDS = (MessageId.STATUS_UPDATED, MessageId.EXTENDED_STATUS_UPDATED)


class SamsungSession(Session[SamsungCapabilities, SamsungState]):
    """
    Session for Galaxy Buds devices, legacy and modern framing.

    Example:
        >>> from budslink.capabilities.samsung import GALAXY_BUDS_PLUS
        >>> from budslink.scheduling import VirtualScheduler
        >>> sent = []
        >>> session = SamsungSession(GALAXY_BUDS_PLUS, sent.append, scheduler=VirtualScheduler())
        >>> session.start()
        >>> sent[0].hex(" ")
        'fd 03 00 60 a6 6c dd'
    """

    vendor = "samsung"

    def _create_codec(self) -> SamsungFrameCodec:
        return SamsungFrameCodec(legacy=self._caps.legacy_framing)

    def _initial_state(self) -> SamsungState:
        return SamsungState()

    def start(self) -> None:
        self._require_new()
        logger.info("Requesting %s status", self._caps.display_name)
        self._send_command(commands.status_request())
        self._set_state(SessionState.AWAITING_INITIAL_STATE)

    def _handle_frame(self, frame: Frame) -> None:
        logger.debug("RX: %r", frame)
        new_state, events = decode_frame(self._device_state, frame, self._caps)
        self._apply(new_state, events)

        if frame.kind in _STATUS_IDS and self._state is SessionState.AWAITING_INITIAL_STATE:
            logger.info("%s ready", self._caps.display_name)
            self._set_state(SessionState.STEADY)

    def _send_command(self, command: SamsungCommand) -> None:
        self._write(self._codec.encode(command.msg_id, command.payload))

    def request_status(self) -> None:
        """Ask the buds to push a fresh status frame."""
        self._send_command(commands.status_request())

    def set_anc_mode(self, mode: NoiseControlMode) -> None:
        """
        Set the noise control mode.

        Modes the model does not support are ignored.

        Args:
            mode: Target mode.
        """
        self._ensure_open()
        command = commands.set_anc_mode(self._caps, mode)
        if command is None:
            return
        self._send_command(command)
