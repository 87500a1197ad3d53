"""
AirPods / Beats (AAP) protocol session.

Handshake:
    1. HANDSHAKE. State: HANDSHAKE_SENT.
    2. On the handshake ack, SET_SPECIFIC_FEATURES when the model has
       conversation awareness. State: FEATURES_NEGOTIATED. Some firmware
       never acknowledges the handshake, so the step also runs once
       ``response_timeout`` elapses.
    3. After ``settle_delay``, REQUEST_NOTIFICATIONS. State: STEADY.

There is no acknowledgement layer; every packet is written once.
"""

from __future__ import annotations

import logging

from budslink.commands import apple as commands
from budslink.models.capabilities import AppleCapabilities
from budslink.models.events import AwarenessModeUpdate
from budslink.models.state import AppleState
from budslink.parsers.apple import decode_frame
from budslink.parsers.common import enum_or_none
from budslink.protocol.apple_codec import AppleFrameCodec
from budslink.protocol.apple_constants import (
    AwarenessMode,
    EarDetection,
    ListeningMode,
    MessageKind,
    PressDuration,
    PressSpeed,
    VolumeSwipeInterval,
)
from budslink.protocol.frames import Frame
from budslink.scheduling import TimerHandle
from budslink.sessions.base import Session, SessionState

logger = logging.getLogger(__name__)


class AppleSession(Session[AppleCapabilities, AppleState]):
    """
    Session for AirPods and Beats devices.

    Example:
        >>> from budslink.capabilities.apple import AIRPODS_PRO_2
        >>> from budslink.scheduling import VirtualScheduler
        >>> scheduler = VirtualScheduler()
        >>> session = AppleSession(AIRPODS_PRO_2, lambda data: None, scheduler=scheduler)
        >>> session.start()
        >>> session.on_data(bytes.fromhex("01000400"))
        >>> session.state
        <SessionState.FEATURES_NEGOTIATED: 3>
        >>> scheduler.advance(0.25)
        >>> session.state
        <SessionState.STEADY: 5>
    """

    vendor = "apple"
    _handshake_timer: TimerHandle | None = None

    def _create_codec(self) -> AppleFrameCodec:
        return AppleFrameCodec()

    def _initial_state(self) -> AppleState:
        return AppleState()

    # ===== Handshake =====

    def start(self) -> None:
        self._require_new()
        logger.info("Starting %s handshake", self._caps.display_name)
        self._set_state(SessionState.HANDSHAKE_SENT)
        self._handshake_timer = self._schedule(
            self._config.response_timeout, self._on_handshake_timeout
        )
        self._write(commands.handshake())

    def _on_handshake_timeout(self) -> None:
        if self._state is not SessionState.HANDSHAKE_SENT:
            return
        logger.warning(
            "No handshake ack after %.1fs, continuing", self._config.response_timeout
        )
        self._negotiate_features()

    def _negotiate_features(self) -> None:
        if self._handshake_timer is not None:
            self._handshake_timer.cancel()
            self._handshake_timer = None

        features = commands.set_specific_features(self._caps)
        if features is not None:
            self._write(features)
            logger.debug("Specific features sent")
        self._set_state(SessionState.FEATURES_NEGOTIATED)
        self._schedule(self._config.settle_delay, self._request_notifications)

    def _request_notifications(self) -> None:
        if self.is_closed:
            return
        self._write(commands.request_notifications())
        logger.info("%s ready", self._caps.display_name)
        self._set_state(SessionState.STEADY)

    # ===== Inbound =====

    def _handle_frame(self, frame: Frame) -> None:
        logger.debug("RX: %r", frame)
        previous = self._device_state
        new_state, events = decode_frame(previous, frame, self._caps)
        self._apply(new_state, events)

        if frame.kind == MessageKind.HANDSHAKE_ACK:
            if self._state is SessionState.HANDSHAKE_SENT:
                self._negotiate_features()
        elif frame.kind == MessageKind.EAR_DETECTION:
            self._check_features_on_insert(previous, frame.payload)

    def _check_features_on_insert(self, previous: AppleState, payload: bytes) -> None:
        # Re-enable awareness reporting when a bud goes back in.
        if not (self._caps.awareness_supported and previous.features_acked):
            return
        if len(payload) < 2:
            return
        bud1 = enum_or_none(EarDetection, payload[0])
        bud2 = enum_or_none(EarDetection, payload[1])
        if bud1 is None or bud2 is None:
            return

        was_out = previous.bud1 != EarDetection.IN_EAR and previous.bud2 != EarDetection.IN_EAR
        # bud2 uses != here, unlike bud1.
        now_in = bud1 == EarDetection.IN_EAR or bud2 != EarDetection.IN_EAR
        if was_out and now_in:
            features = commands.set_specific_features(self._caps)
            if features is not None:
                self._write(features)
                logger.debug("Specific features re-sent after ear detection change")

    # ===== Settings =====

    def _write_setting(self, name: str, packet: bytes | None) -> bool:
        self._ensure_open()
        if packet is None:
            logger.debug("%s does not support %s", self._caps.display_name, name)
            return False
        self._write(packet)
        return True

    def set_listening_mode(self, mode: ListeningMode) -> None:
        """
        Set the listening mode.

        Modes the model does not offer are ignored.
        """
        self._write_setting("listening mode", commands.set_listening_mode(self._caps, mode))

    def set_adaptive_level(self, level: int) -> None:
        """
        Set the adaptive audio level.

        Raises:
            ProtocolError: If the level is outside 0-100.
        """
        self._write_setting("adaptive level", commands.set_adaptive_level(self._caps, level))

    def set_awareness_mode(self, mode: AwarenessMode) -> None:
        """
        Turn conversation awareness on or off.

        The device does not echo this setting, so the new mode is reported
        through the callbacks as soon as it is written.
        """
        if not self._write_setting(
            "conversation awareness", commands.set_awareness_mode(self._caps, mode)
        ):
            return
        if self._device_state.awareness_mode == mode:
            return
        self._device_state = self._device_state.model_copy(update={"awareness_mode": mode})
        self._emit(AwarenessModeUpdate(mode))

    def set_press_speed(self, speed: PressSpeed) -> None:
        self._write_setting("press speed", commands.set_press_speed(self._caps, speed))

    def set_press_duration(self, duration: PressDuration) -> None:
        self._write_setting("press duration", commands.set_press_duration(self._caps, duration))

    def set_tone_volume(self, volume: int) -> None:
        """
        Set the volume of the noise control tones.

        Raises:
            ProtocolError: If the volume is outside 0-100.
        """
        self._write_setting("tone volume", commands.set_tone_volume(self._caps, volume))

    def set_volume_swipe_interval(self, interval: VolumeSwipeInterval) -> None:
        self._write_setting(
            "volume swipe", commands.set_volume_swipe_interval(self._caps, interval)
        )

    def set_volume_swipe_mode(self, enabled: bool) -> None:
        self._write_setting("volume swipe", commands.set_volume_swipe_mode(self._caps, enabled))
