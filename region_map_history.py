"""
Definition History: Append-Only Log of Region Definitions
List order is definition order and precedence order (last one wins).
"""

from dataclasses import dataclass

import numpy as np

import region_map_config as C
from region_map_errors import RegionConfigError
from region_map_shapes import Shape


def check_region_id(region_id):
    """
    Validate a region id (0 <= id < NREGION) before any state is touched.

    Returns:
        the id as int
    """
    try:
        whole = not isinstance(region_id, (bool, np.bool_)) and int(region_id) == region_id
    except (TypeError, ValueError):
        whole = False
    if not whole:
        raise RegionConfigError(f"region id should be an integer 0-{C.NREGION - 1}, have: {region_id!r}")
    region_id = int(region_id)
    if not 0 <= region_id < C.NREGION:
        raise RegionConfigError(f"region id should be 0-{C.NREGION - 1}, have: {region_id}")
    return region_id


@dataclass(frozen=True)
class DefinitionEntry:
    region: int
    shape: Shape


class DefinitionHistory:
    """
    Ordered (region, shape) definitions, replayed after every resize.

    Entries are never removed. Single-cell overrides are not recorded here.
    """

    def __init__(self):
        self._entries = []

    def append(self, region, shape):
        if not isinstance(shape, Shape):
            raise RegionConfigError(f"region shape must be a Shape, have {type(shape).__name__}")
        entry = DefinitionEntry(check_region_id(region), shape)
        self._entries.append(entry)
        return entry

    def __iter__(self):
        return iter(tuple(self._entries))

    def __len__(self):
        return len(self._entries)

    def __getitem__(self, i):
        return self._entries[i]

    def region_at(self, x, y, z):
        """
        Region of a single world coordinate, evaluated analytically.

        Scans from the most recent definition back; 0 if none matches.
        """
        for entry in reversed(self._entries):
            if entry.shape.contains(x, y, z):
                return entry.region
        return C.DEFAULT_REGION

    def regions_at(self, x, y, z):
        """
        Element-wise region_at over coordinate arrays.

        Painting in definition order gives the same answer as the
        newest-first scan: the last covering definition wins.
        """
        out = np.full(np.broadcast(x, y, z).shape, C.DEFAULT_REGION, dtype=np.uint8)
        for entry in self._entries:
            out[entry.shape(x, y, z)] = entry.region
        return out

    def defined_ids(self):
        """Sorted ids that appear in the history."""
        return sorted({e.region for e in self._entries})
