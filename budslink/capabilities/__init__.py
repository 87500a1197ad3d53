"""
Built-in capability tables and the registry that serves them.
"""

from budslink.capabilities.registry import CapabilityRegistry, create_default_registry

__all__ = [
    "CapabilityRegistry",
    "create_default_registry",
]
