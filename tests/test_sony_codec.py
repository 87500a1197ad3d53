"""Tests for the Sony MDR frame codec."""

import pytest

from budslink.exceptions import ChecksumError, FrameError, ProtocolError
from budslink.protocol.frames import Frame, FrameParseResult
from budslink.protocol.sony_codec import SonyFrameCodec, escape_bytes, unescape_bytes
from budslink.protocol.sony_constants import MessageType

PROTOCOL_INFO_REQUEST = bytes.fromhex("3e 0c 00 00 00 00 02 00 00 0e 3c")


class TestEscaping:
    """Tests for marker byte escaping."""

    def test_escape_markers(self):
        """Test that every marker byte becomes an escape pair."""
        assert escape_bytes(bytes([0x3E, 0x3C, 0x3D])) == bytes.fromhex("3d 2e 3d 2c 3d 2d")

    def test_escape_leaves_other_bytes(self):
        """Test that ordinary bytes pass through."""
        assert escape_bytes(bytes([0x00, 0x2E, 0xFF])) == bytes([0x00, 0x2E, 0xFF])

    def test_unescape_restores(self):
        """Test that unescaping reverses escaping."""
        data = bytes(range(0x30, 0x50))
        assert unescape_bytes(escape_bytes(data)) == data

    def test_unescape_dangling_escape(self):
        """Test that a trailing escape byte is rejected."""
        assert unescape_bytes(bytes([0x01, 0x3D])) is None


class TestSonyEncode:
    """Tests for building Sony frames."""

    @pytest.fixture
    def codec(self):
        """Create a codec."""
        return SonyFrameCodec()

    def test_encode_command(self, codec):
        """Test encoding the protocol info request."""
        wire = codec.encode(MessageType.COMMAND_1, bytes([0x00, 0x00]), sequence=0)
        assert wire == PROTOCOL_INFO_REQUEST

    def test_encode_ack(self, codec):
        """Test that an ACK carries the inverse sequence bit."""
        assert codec.encode_ack(0) == bytes.fromhex("3e 01 01 00 00 00 00 02 3c")
        assert codec.encode_ack(1) == bytes.fromhex("3e 01 00 00 00 00 00 01 3c")

    def test_encode_escapes_payload(self, codec):
        """Test that a marker byte in the payload is escaped."""
        wire = codec.encode(MessageType.COMMAND_1, bytes([0x3E]))
        assert wire == bytes.fromhex("3e 0c 00 00 00 00 01 3d 2e 4b 3c")

    def test_encode_escapes_checksum(self, codec):
        """Test that a checksum equal to a marker byte is escaped."""
        wire = codec.encode(MessageType.COMMAND_1, bytes([0x2F]))
        assert wire == bytes.fromhex("3e 0c 00 00 00 00 01 2f 3d 2c 3c")

    def test_encode_invalid_sequence(self, codec):
        """Test that sequence values other than 0 and 1 raise."""
        with pytest.raises(ProtocolError):
            codec.encode(MessageType.COMMAND_1, b"", sequence=2)

    def test_encode_invalid_kind(self, codec):
        """Test that an out of range message type raises."""
        with pytest.raises(ProtocolError):
            codec.encode(0x100, b"")


class TestSonyFeed:
    """Tests for reassembling Sony frames from chunks."""

    @pytest.fixture
    def errors(self):
        """Collect rejected spans."""
        return []

    @pytest.fixture
    def codec(self, errors):
        """Create a codec that records rejected spans."""
        return SonyFrameCodec(on_invalid=errors.append)

    def test_feed_single_frame(self, codec):
        """Test decoding one complete frame."""
        frames = codec.feed(PROTOCOL_INFO_REQUEST)
        assert frames == [Frame(kind=MessageType.COMMAND_1, payload=b"\x00\x00", sequence=0)]
        assert frames[0].raw == PROTOCOL_INFO_REQUEST
        assert codec.buffered == b""

    def test_feed_round_trip_with_escapes(self, codec):
        """Test that escaped payload bytes come back unchanged."""
        payload = bytes([0x3E, 0x3C, 0x3D, 0x00, 0x11])
        frames = codec.feed(codec.encode(MessageType.COMMAND_2, payload, sequence=1))
        assert len(frames) == 1
        assert frames[0].kind == MessageType.COMMAND_2
        assert frames[0].sequence == 1
        assert frames[0].payload == payload

    @pytest.mark.parametrize("split", range(1, len(PROTOCOL_INFO_REQUEST)))
    def test_feed_split_anywhere(self, codec, split):
        """Test that a frame split at any boundary is reassembled."""
        assert codec.feed(PROTOCOL_INFO_REQUEST[:split]) == []
        frames = codec.feed(PROTOCOL_INFO_REQUEST[split:])
        assert len(frames) == 1
        assert frames[0].payload == b"\x00\x00"

    def test_feed_byte_by_byte(self, codec):
        """Test feeding one byte at a time."""
        frames = []
        for byte in PROTOCOL_INFO_REQUEST:
            frames.extend(codec.feed(bytes([byte])))
        assert len(frames) == 1

    def test_feed_two_frames_one_chunk(self, codec):
        """Test that back-to-back frames are both decoded in order."""
        ack = codec.encode_ack(0)
        frames = codec.feed(ack + PROTOCOL_INFO_REQUEST)
        assert [f.kind for f in frames] == [MessageType.ACK, MessageType.COMMAND_1]

    def test_feed_discards_noise(self, codec, errors):
        """Test that bytes outside a frame are discarded silently."""
        frames = codec.feed(b"\x00\x11\x22" + PROTOCOL_INFO_REQUEST)
        assert len(frames) == 1
        assert errors == []

    def test_bit_flip_dropped(self, codec, errors):
        """Test that a corrupted frame is dropped and counted."""
        corrupted = bytearray(PROTOCOL_INFO_REQUEST)
        corrupted[7] ^= 0x01
        assert codec.feed(bytes(corrupted)) == []
        assert codec.dropped == 1
        assert errors[0].result is FrameParseResult.INVALID_CHECKSUM
        assert errors[0].expected == 0x0F
        assert errors[0].received == 0x0E
        assert isinstance(errors[0].to_exception(), ChecksumError)

    def test_recovers_after_bad_frame(self, codec):
        """Test that a valid frame after a corrupted one is decoded."""
        corrupted = bytearray(PROTOCOL_INFO_REQUEST)
        corrupted[-2] = 0x00
        frames = codec.feed(bytes(corrupted) + PROTOCOL_INFO_REQUEST)
        assert len(frames) == 1
        assert codec.dropped == 1

    def test_length_mismatch(self, codec, errors):
        """Test that a length field disagreeing with the payload is rejected."""
        assert codec.feed(bytes.fromhex("3e 0c 00 00 00 00 02 aa b8 3c")) == []
        assert errors[0].result is FrameParseResult.INVALID_FORMAT
        assert isinstance(errors[0].to_exception(), FrameError)

    def test_body_too_short(self, codec, errors):
        """Test that a span without a full header is rejected."""
        assert codec.feed(bytes.fromhex("3e 01 3c")) == []
        assert errors[0].result is FrameParseResult.INVALID_FORMAT

    def test_dangling_escape(self, codec, errors):
        """Test that a span ending in an escape byte is rejected."""
        assert codec.feed(bytes.fromhex("3e 0c 3d 3c")) == []
        assert errors[0].result is FrameParseResult.INVALID_FORMAT

    def test_interrupted_frame(self, codec, errors):
        """Test that a header inside an open frame restarts parsing."""
        frames = codec.feed(bytes.fromhex("3e 0c 00") + PROTOCOL_INFO_REQUEST)
        assert len(frames) == 1
        assert errors[0].result is FrameParseResult.INCOMPLETE_FRAME

    def test_reset_discards_partial(self, codec):
        """Test that reset drops a partially received frame."""
        codec.feed(PROTOCOL_INFO_REQUEST[:5])
        assert codec.buffered == PROTOCOL_INFO_REQUEST[:5]
        codec.reset()
        assert codec.buffered == b""
        assert codec.feed(PROTOCOL_INFO_REQUEST[5:]) == []

    def test_frame_repr(self, codec):
        """Test the frame representation."""
        frames = codec.feed(codec.encode_ack(0))
        assert repr(frames[0]) == "Frame(kind=0x01, seq=1, payload=)"
