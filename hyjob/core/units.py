"""Unit lookup, value conversion and display-zone handling."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Mapping, Optional

import numpy as np

from hyjob.core.errors import (
    InvalidZoneOrderingError,
    UnknownUnitError,
    UnsupportedConversionError,
    ValidationError,
)
from hyjob.core.models import ColorZone, Unit

logger = logging.getLogger(__name__)

# Multiply-by-constant strategy: result = value * m
MULTIPLY = "mx"


def zones_strictly_increasing(unit: Unit) -> bool:
    """Check that the custom zone upper bounds are strictly ascending."""
    uppers = np.asarray([z.upper for z in unit.zones], dtype=float)
    return bool(np.all(np.diff(uppers) > 0))


class UnitRegistry:
    """Lookup of unit identifiers to conversion strategies and color zones.

    Args:
        units: Mapping of unitId -> Unit, as parsed from the job's ``units``
    """

    def __init__(self, units: Mapping[str, Unit]):
        self._units: Dict[str, Unit] = dict(units)

    def __contains__(self, unit_id: str) -> bool:
        return unit_id in self._units

    def __len__(self) -> int:
        return len(self._units)

    def resolve(self, unit_id: str) -> Unit:
        """Return the Unit for unit_id, or raise UnknownUnitError."""
        try:
            return self._units[unit_id]
        except KeyError:
            raise UnknownUnitError(unit_id) from None

    def convert(self, value: float, unit_id: str) -> float:
        """Apply the unit's conversion strategy to value.

        Raises:
            UnknownUnitError: If unit_id is not registered
            UnsupportedConversionError: If the strategy type is not "mx"
        """
        unit = self.resolve(unit_id)
        if unit.conversion_type != MULTIPLY:
            raise UnsupportedConversionError(unit_id, unit.conversion_type)
        return value * unit.multiplier

    def zone_for(self, value: float, unit_id: str) -> Optional[ColorZone]:
        """Return the display zone a converted value falls into.

        Zones are half-open bands ``(previous upper, upper]`` starting at
        ``custom_zones.lower``. Values outside every band yield None.
        """
        unit = self.resolve(unit_id)
        if unit.zones and not zones_strictly_increasing(unit):
            raise InvalidZoneOrderingError(unit_id, [z.upper for z in unit.zones])

        converted = self.convert(value, unit_id)
        if converted < unit.lower:
            return None
        uppers = np.asarray([z.upper for z in unit.zones], dtype=float)
        idx = int(np.searchsorted(uppers, converted, side="left"))
        if idx >= len(unit.zones):
            return None
        return unit.zones[idx]

    def check(self) -> Iterator[ValidationError]:
        """Yield a validation error for every misconfigured unit."""
        for unit_id, unit in self._units.items():
            if unit.conversion_type != MULTIPLY:
                yield UnsupportedConversionError(unit_id, unit.conversion_type)
            if not zones_strictly_increasing(unit):
                logger.debug(f"Unit {unit_id} has unordered zones: {[z.upper for z in unit.zones]}")
                yield InvalidZoneOrderingError(unit_id, [z.upper for z in unit.zones])
