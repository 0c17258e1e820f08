"""
Shifter: Slide the Region Map with a Moving Simulation Window
Accelerator shift + analytic repair of the newly exposed boundary slab
"""

import numpy as np

import region_map_config as C
from region_map_errors import RegionConfigError


def shift_dirty_range(dx, n):
    """
    Cell range [i1, i2) exposed by a shift of dx cells on an axis of n cells.

    dx > 0 moves contents towards higher indices and exposes the low end;
    dx < 0 exposes the high end. A shift of a whole window or more exposes
    everything.
    """
    if dx == 0:
        raise RegionConfigError("shift dx must be non-zero")
    width = min(abs(dx), n)
    if dx > 0:
        return 0, width
    return n - width, n


def boundary_slab(mesh, axis, dx):
    """
    Cell indices (ix, iy, iz) of the exposed slab, as flat int arrays.
    """
    i1, i2 = shift_dirty_range(dx, mesh.size[axis])
    ranges = [np.arange(n) for n in mesh.size]
    ranges[axis] = np.arange(i1, i2)
    iz, iy, ix = np.meshgrid(ranges[C.Z], ranges[C.Y], ranges[C.X], indexing="ij")
    return ix.ravel(), iy.ravel(), iz.ravel()


def shift_regions(regions, dx, axis=C.X):
    """
    Translate the resident map by dx cells along axis and repair the boundary.

    The mesh reported by regions.mesh must already include the shift, so
    exposed cells are classified at their new world coordinates.

    Steps:
        1. Accelerator shift into the map's scratch buffer, exposed cells get id 0
        2. Copy back into the resident buffer
        3. For each exposed cell, look up its true region in the definition
           history and write it if non-zero

    Returns:
        number of boundary cells written
    """
    mesh = regions.mesh
    backend = regions.backend
    resident = regions.buffer
    scratch = regions.scratch

    backend.shift_window(scratch, resident, mesh, axis, dx, C.DEFAULT_REGION)
    backend.copy(resident, scratch)

    if len(regions.history) == 0:
        return 0

    ix, iy, iz = boundary_slab(mesh, axis, dx)
    x, y, z = mesh.index_to_coord(ix, iy, iz)
    ids = regions.history.regions_at(x, y, z)

    written = 0
    for i in np.flatnonzero(ids != C.DEFAULT_REGION):
        regions.set_cell(int(ix[i]), int(iy[i]), int(iz[i]), int(ids[i]))
        written += 1
    if C.VERBOSE:
        print(f"[SHIFT] {C.AXIS_NAMES[axis]} by {dx} cells: "
              f"slab={ix.size} cells, repaired={written}")
    return written
