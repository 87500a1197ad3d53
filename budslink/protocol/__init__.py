"""
Wire-level protocol support: checksums, frame types and vendor codecs.
"""

from budslink.protocol.apple_codec import AppleFrameCodec, encode_control
from budslink.protocol.checksums import calculate_checksum, crc16, validate_checksum
from budslink.protocol.frames import Frame, FrameCodec, FrameParseError, FrameParseResult
from budslink.protocol.samsung_codec import SamsungFrameCodec
from budslink.protocol.sony_codec import SonyFrameCodec, escape_bytes, unescape_bytes

__all__ = [
    # Frames
    "Frame",
    "FrameCodec",
    "FrameParseError",
    "FrameParseResult",
    # Codecs
    "SonyFrameCodec",
    "SamsungFrameCodec",
    "AppleFrameCodec",
    # Helpers
    "calculate_checksum",
    "validate_checksum",
    "crc16",
    "escape_bytes",
    "unescape_bytes",
    "encode_control",
]
