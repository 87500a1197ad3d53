"""
Capability registry.

The registry maps model identifiers to capability records. Model
identification itself (name patterns, product ids, service UUIDs) happens
outside this library; the caller looks up the record for the model it
detected and hands it to create_session().

Example:
    >>> registry = create_default_registry()
    >>> caps = registry.get("WH-1000XM4")
    >>> caps.vendor
    <Vendor.SONY: 'sony'>
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from budslink.exceptions import UnknownModelError
from budslink.models.capabilities import AnyCapabilities, Vendor

logger = logging.getLogger(__name__)


class CapabilityRegistry:
    """
    Registry of capability records keyed by model id.

    Registering a record under an id that is already present replaces
    the previous record.
    """

    def __init__(self, records: Iterable[AnyCapabilities] = ()) -> None:
        self._records: dict[str, AnyCapabilities] = {}
        for record in records:
            self.register(record)

    def register(self, record: AnyCapabilities) -> None:
        """
        Register a capability record.

        Args:
            record: Record to register under its model_id.
        """
        if record.model_id in self._records:
            logger.debug("Replacing capability record for %s", record.model_id)
        self._records[record.model_id] = record

    def get(self, model_id: str) -> AnyCapabilities:
        """
        Look up the record for a model.

        Args:
            model_id: Model identifier.

        Returns:
            The registered record.

        Raises:
            UnknownModelError: If no record is registered for the model.
        """
        try:
            return self._records[model_id]
        except KeyError:
            raise UnknownModelError(model_id) from None

    def find(self, model_id: str) -> AnyCapabilities | None:
        """Look up a record, returning None if the model is unknown."""
        return self._records.get(model_id)

    def has(self, model_id: str) -> bool:
        """Check if a record is registered for the model."""
        return model_id in self._records

    def unregister(self, model_id: str) -> bool:
        """
        Remove a record.

        Args:
            model_id: Model to unregister.

        Returns:
            True if a record was removed, False if none was registered.
        """
        if model_id in self._records:
            del self._records[model_id]
            return True
        return False

    def by_vendor(self, vendor: Vendor) -> list[AnyCapabilities]:
        """All records of one protocol family, in registration order."""
        return [r for r in self._records.values() if r.vendor is vendor]

    @property
    def model_ids(self) -> frozenset[str]:
        """All registered model ids."""
        return frozenset(self._records)

    def clear(self) -> None:
        """Remove all records."""
        self._records.clear()

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._records

    def __iter__(self) -> Iterator[AnyCapabilities]:
        return iter(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        counts = ", ".join(f"{v.value}={len(self.by_vendor(v))}" for v in Vendor)
        return f"CapabilityRegistry({counts})"


def create_default_registry() -> CapabilityRegistry:
    """
    Create a registry holding every built-in model.

    Returns:
        CapabilityRegistry with the Sony, Samsung and Apple tables.
    """
    from budslink.capabilities.apple import APPLE_MODELS
    from budslink.capabilities.samsung import SAMSUNG_MODELS
    from budslink.capabilities.sony import SONY_MODELS

    return CapabilityRegistry((*SONY_MODELS, *SAMSUNG_MODELS, *APPLE_MODELS))
