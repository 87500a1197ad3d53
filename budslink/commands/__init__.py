"""
Semantic encoders: one builder per settable feature.

Builders are pure and capability-gated. Asking for a feature the model
does not have returns None (or an empty list) instead of raising; only
out-of-range values raise ProtocolError.

Vendor modules are imported as namespaces since several builders share
a name across vendors:

    >>> from budslink.commands import sony
    >>> sony.protocol_info_request().payload
    b'\\x00\\x00'
"""

from budslink.commands import apple, samsung, sony
from budslink.commands.samsung import SamsungCommand
from budslink.commands.sony import SonyCommand

__all__ = [
    "apple",
    "samsung",
    "sony",
    "SamsungCommand",
    "SonyCommand",
]
