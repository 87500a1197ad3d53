"""
Sony MDR protocol session.

Handshake:
    1. Protocol info request (tag "init") through the delivery queue.
       State: HANDSHAKE_SENT.
    2. First protocol info reply. State: FEATURES_NEGOTIATED.
    3. Support function request, awaited by a ResponseWaiter. The reply
       records the function codes the model reports.
    4. State: AWAITING_INITIAL_STATE. Device info requests, then one GET
       per supported feature.
    5. Once the queue has drained the initial requests. State: STEADY.

Every inbound command frame is acknowledged directly, outside the
queue. If the init message or the support info wait exhausts its
retries the handshake fails and the session closes.
"""

from __future__ import annotations

import logging
from typing import Sequence

from budslink.callbacks import DeviceCallbacks
from budslink.commands import sony as commands
from budslink.commands.sony import SonyCommand
from budslink.config import DEFAULT_SESSION_CONFIG, SessionConfig
from budslink.exceptions import HandshakeError
from budslink.models.capabilities import SonyCapabilities
from budslink.models.state import SonyState
from budslink.parsers.sony import decode_frame, response_tag
from budslink.protocol.frames import Frame
from budslink.protocol.sony_codec import SonyFrameCodec
from budslink.protocol.sony_constants import (
    AMBIENT_LEVEL_DEFAULT,
    AmbientSoundMode,
    AutoAsmSensitivity,
    AutoPowerOff,
    BatteryType,
    BgmDistance,
    EqualizerPreset,
    ListeningMode,
    MessageType,
    ProtocolRevision,
    ResponseTag,
    Speak2ChatSensitivity,
    Speak2ChatTimeout,
)
from budslink.scheduling import Scheduler
from budslink.sessions.base import SendFunction, Session, SessionState
from budslink.sessions.delivery import QueuedMessage, ReliableDeliveryQueue, ResponseWaiter

logger = logging.getLogger(__name__)


class SonySession(Session[SonyCapabilities, SonyState]):
    """
    Session for Sony V1 and V2 devices.

    Example:
        >>> from budslink.capabilities.sony import WH_1000XM4
        >>> from budslink.scheduling import VirtualScheduler
        >>> sent = []
        >>> session = SonySession(WH_1000XM4, sent.append, scheduler=VirtualScheduler())
        >>> session.start()
        >>> session.state
        <SessionState.HANDSHAKE_SENT: 2>
    """

    vendor = "sony"

    def __init__(
        self,
        capabilities: SonyCapabilities,
        send: SendFunction,
        callbacks: DeviceCallbacks | None = None,
        scheduler: Scheduler | None = None,
        config: SessionConfig = DEFAULT_SESSION_CONFIG,
    ) -> None:
        super().__init__(capabilities, send, callbacks, scheduler, config)
        timeout = (
            config.ack_timeout
            if capabilities.revision is ProtocolRevision.V1
            else config.ack_timeout_v2
        )
        self._queue = ReliableDeliveryQueue(
            self._write,
            self._scheduler,
            timeout,
            self._on_exhausted,
            encode=self._codec.encode,
        )
        self._support_waiter: ResponseWaiter | None = None
        self._failure: HandshakeError | None = None

    def _create_codec(self) -> SonyFrameCodec:
        return SonyFrameCodec()

    def _initial_state(self) -> SonyState:
        return SonyState()

    @property
    def queue(self) -> ReliableDeliveryQueue:
        return self._queue

    @property
    def failure(self) -> HandshakeError | None:
        """Why the handshake failed, if it did."""
        return self._failure

    # ===== Handshake =====

    def start(self) -> None:
        self._require_new()
        logger.info(
            "Starting %s handshake (protocol %s)",
            self._caps.display_name,
            self._caps.revision.name,
        )
        self._set_state(SessionState.HANDSHAKE_SENT)
        self._submit(commands.protocol_info_request())

    def _on_init_reply(self) -> None:
        self._set_state(SessionState.FEATURES_NEGOTIATED)
        self._support_waiter = ResponseWaiter(
            ResponseTag.SUPPORT_INFO,
            lambda: self._submit(commands.support_function_request(), retries=0),
            self._scheduler,
            self._config.response_timeout,
            self._config.response_retries,
            on_success=self._on_support_info,
            on_failure=lambda: self._fail_handshake(
                ResponseTag.SUPPORT_INFO, self._config.response_retries
            ),
        )
        self._support_waiter.start()

    def _on_support_info(self) -> None:
        self._support_waiter = None
        self._set_state(SessionState.AWAITING_INITIAL_STATE)

        requests = commands.device_info_requests(self._caps)
        requests += commands.initial_state_requests(self._caps, self._device_state)
        logger.debug("Requesting initial state: %s", ", ".join(r.tag for r in requests))
        for request in requests:
            self._submit(request)
        self._check_initial_state_done()

    def _check_initial_state_done(self) -> None:
        if self._state is SessionState.AWAITING_INITIAL_STATE and len(self._queue) == 0:
            logger.info("%s ready", self._caps.display_name)
            self._set_state(SessionState.STEADY)

    def _on_exhausted(self, message: QueuedMessage) -> None:
        if message.tag == ResponseTag.INIT and self._state is SessionState.HANDSHAKE_SENT:
            self._fail_handshake(message.tag, message.attempts)
            return
        self._check_initial_state_done()

    def _fail_handshake(self, stage: str, attempts: int) -> None:
        self._failure = HandshakeError(
            f"{self._caps.display_name} did not answer '{stage}'",
            stage=stage,
            attempts=attempts,
        )
        logger.error("Handshake failed: %s", self._failure)
        self.close()

    def _teardown(self) -> None:
        self._queue.close()
        if self._support_waiter is not None:
            self._support_waiter.cancel()
            self._support_waiter = None
        super()._teardown()

    # ===== Inbound =====

    def _handle_frame(self, frame: Frame) -> None:
        logger.debug("RX: %r", frame)
        if frame.kind in (MessageType.COMMAND_1, MessageType.COMMAND_2):
            self._write(self._codec.encode_ack(frame.sequence or 0))

        new_state, events = decode_frame(self._device_state, frame, self._caps)
        self._apply(new_state, events)

        tag = response_tag(frame, self._caps.revision)
        if tag is None or self.is_closed:
            return

        self._queue.acknowledge(tag)
        if tag == ResponseTag.INIT and self._state is SessionState.HANDSHAKE_SENT:
            self._on_init_reply()
        elif self._support_waiter is not None:
            self._support_waiter.resolve(tag)
        self._check_initial_state_done()

    # ===== Outbound =====

    def _submit(self, command: SonyCommand | None, retries: int | None = None) -> None:
        if command is None:
            return
        self._ensure_open()
        if retries is None:
            retries = (
                self._config.handshake_retries
                if command.is_request
                else self._config.command_retries
            )
        self._queue.enqueue(command.tag, command.kind, command.payload, retries)

    def _submit_setting(self, name: str, command: SonyCommand | None) -> None:
        self._ensure_open()
        if command is None:
            logger.debug("%s does not support %s", self._caps.display_name, name)
            return
        self._submit(command)

    def request_battery(self) -> None:
        """Ask for every battery the model has."""
        if self._caps.battery_single:
            self._submit(commands.battery_request(self._caps, BatteryType.SINGLE))
        if self._caps.battery_dual:
            self._submit(commands.battery_request(self._caps, BatteryType.DUAL))
        if self._caps.battery_case:
            self._submit(commands.battery_request(self._caps, BatteryType.CASE))

    def refresh(self) -> None:
        """Re-request the state of every supported feature."""
        for request in commands.initial_state_requests(self._caps, self._device_state):
            self._submit(request)

    # ===== Settings =====

    def set_ambient_sound_control(
        self,
        mode: AmbientSoundMode,
        focus_on_voice: bool | None = None,
        level: int | None = None,
        adaptive: bool | None = None,
        sensitivity: AutoAsmSensitivity | None = None,
    ) -> None:
        """
        Set noise cancelling / ambient sound.

        Arguments left as None keep their last reported value.

        Args:
            mode: Target mode.
            focus_on_voice: Focus on voice in ambient mode.
            level: Ambient sound level, 0-20.
            adaptive: Adaptive ambient sound (adaptive NC models only).
            sensitivity: Adaptive sensitivity (adaptive NC models only).
        """
        current = self._device_state
        if focus_on_voice is None:
            focus_on_voice = bool(current.focus_on_voice)
        if level is None:
            level = current.ambient_level
        if level is None:
            level = AMBIENT_LEVEL_DEFAULT
        if adaptive is None:
            adaptive = bool(current.adaptive_enabled)
        if sensitivity is None:
            sensitivity = current.adaptive_sensitivity or AutoAsmSensitivity.STANDARD

        self._submit_setting(
            "ambient sound control",
            commands.set_ambient_sound_control(
                self._caps, mode, focus_on_voice, level, adaptive, sensitivity
            ),
        )

    def set_speak_to_chat_enabled(self, enabled: bool) -> None:
        self._submit_setting(
            "speak-to-chat", commands.set_speak_to_chat_enabled(self._caps, enabled)
        )

    def set_speak_to_chat_config(
        self, sensitivity: Speak2ChatSensitivity, timeout: Speak2ChatTimeout
    ) -> None:
        self._submit_setting(
            "speak-to-chat configuration",
            commands.set_speak_to_chat_config(self._caps, sensitivity, timeout),
        )

    def set_equalizer_preset(self, preset: EqualizerPreset) -> None:
        self._submit_setting("equalizer", commands.set_equalizer_preset(self._caps, preset))

    def set_equalizer_bands(self, bands: Sequence[int]) -> None:
        """
        Set custom equalizer band levels.

        Raises:
            ProtocolError: If the band count or a level is out of range.
        """
        self._submit_setting("equalizer", commands.set_equalizer_bands(self._caps, bands))

    def set_voice_notifications(self, enabled: bool) -> None:
        self._submit_setting(
            "voice notifications", commands.set_voice_notifications(self._caps, enabled)
        )

    def set_audio_upsampling(self, enabled: bool) -> None:
        self._submit_setting(
            "audio upsampling", commands.set_audio_upsampling(self._caps, enabled)
        )

    def set_pause_when_taken_off(self, enabled: bool) -> None:
        self._submit_setting(
            "pause when taken off", commands.set_pause_when_taken_off(self._caps, enabled)
        )

    def set_auto_power_off(self, setting: AutoPowerOff) -> None:
        self._submit_setting(
            "automatic power off", commands.set_auto_power_off(self._caps, setting)
        )

    def set_listening_mode(
        self, mode: ListeningMode, distance: BgmDistance | None = None
    ) -> None:
        """
        Switch between standard, cinema and background music modes.

        Args:
            mode: Target mode.
            distance: Background music distance; defaults to the last
                reported one.
        """
        self._ensure_open()
        if distance is None:
            distance = self._device_state.bgm_distance or BgmDistance.MY_ROOM

        to_send = commands.set_listening_mode(self._caps, self._device_state, mode, distance)
        if not to_send:
            logger.debug("%s does not support listening mode", self._caps.display_name)
            return
        for command in to_send:
            self._submit(command)

        bgm = mode is ListeningMode.BGM
        update: dict[str, object] = {"bgm_active": bgm, "bgm_distance": distance}
        if not bgm:
            update["listening_mode"] = mode
        self._device_state = self._device_state.model_copy(update=update)
