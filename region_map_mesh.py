"""
Mesh Provider: Grid Geometry and Cell Indexing
Structured 3D mesh with z-major flat layout
"""

from dataclasses import dataclass, replace
from typing import Tuple

import numpy as np
import taichi as ti

import region_map_config as C
from region_map_errors import RegionConfigError, RegionInvariantError

# =============================================================================
# Index Helpers
# =============================================================================

def flat_index(ix, iy, iz, size):
    """
    Flatten 3D cell coordinates to the z-major index (iz*Ny + iy)*Nx + ix.

    Every flat index in this package goes through here.

    Args:
        ix, iy, iz: cell coordinates
        size: (Nx, Ny, Nz)

    Returns:
        flat index (int)

    Raises:
        RegionConfigError: if the cell lies outside the mesh
    """
    nx, ny, nz = size
    if not (0 <= ix < nx and 0 <= iy < ny and 0 <= iz < nz):
        raise RegionConfigError(
            f"cell ({ix}, {iy}, {iz}) out of bounds for mesh {nx}x{ny}x{nz}"
        )
    return (iz * ny + iy) * nx + ix


def reshape_host(array, size):
    """
    Re-interpret a contiguous host list as a (Nz, Ny, Nx) array view.

    Raises:
        RegionInvariantError: if the length does not match the mesh
    """
    nx, ny, nz = size
    if array.size != nx * ny * nz:
        raise RegionInvariantError(
            f"host list has {array.size} elements, mesh {nx}x{ny}x{nz} needs {nx * ny * nz}"
        )
    return array.reshape(nz, ny, nx)


@ti.func
def cell_index(ix: ti.i32, iy: ti.i32, iz: ti.i32, nx: ti.i32, ny: ti.i32) -> ti.i32:
    """Kernel-side counterpart of flat_index (no bounds check)."""
    return (iz * ny + iy) * nx + ix


# =============================================================================
# Mesh
# =============================================================================

@dataclass(frozen=True)
class Mesh:
    """
    Cell counts, cell size, and the world offset of the mesh window.

    Cell (ix, iy, iz) has its centre at (i + 0.5) * c + offset along each axis.
    The offset only changes when the simulation window slides (see shifted).
    """

    nx: int
    ny: int
    nz: int
    cx: float
    cy: float
    cz: float
    offset: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self):
        for n in (self.nx, self.ny, self.nz):
            if int(n) != n or n < 1:
                raise RegionConfigError(f"mesh cell counts must be positive integers, have {self.size}")
        object.__setattr__(self, "nx", int(self.nx))
        object.__setattr__(self, "ny", int(self.ny))
        object.__setattr__(self, "nz", int(self.nz))
        for c in (self.cx, self.cy, self.cz):
            if not c > 0:
                raise RegionConfigError(f"mesh cell sizes must be positive, have {self.cell_size}")

    @property
    def size(self):
        return (self.nx, self.ny, self.nz)

    @property
    def cell_size(self):
        return (self.cx, self.cy, self.cz)

    @property
    def ncell(self):
        return self.nx * self.ny * self.nz

    @property
    def world_size(self):
        return (self.nx * self.cx, self.ny * self.cy, self.nz * self.cz)

    def index(self, ix, iy, iz):
        return flat_index(ix, iy, iz, self.size)

    def index_to_coord(self, ix, iy, iz):
        """World coordinate of a cell centre (works on ints or numpy arrays)."""
        ox, oy, oz = self.offset
        x = (ix + 0.5) * self.cx + ox
        y = (iy + 0.5) * self.cy + oy
        z = (iz + 0.5) * self.cz + oz
        return x, y, z

    def coord_to_index(self, x, y, z):
        """
        Map world coordinates to (possibly out-of-range) cell indices.

        No clamping: callers decide what to do with cells outside the window.
        """
        ox, oy, oz = self.offset
        ix = np.floor((np.asarray(x) - ox) / self.cx).astype(np.int64)
        iy = np.floor((np.asarray(y) - oy) / self.cy).astype(np.int64)
        iz = np.floor((np.asarray(z) - oz) / self.cz).astype(np.int64)
        return ix, iy, iz

    def cell_centers(self):
        """
        Cell-centre coordinates of the whole mesh.

        Returns:
            x, y, z: arrays of shape (Nz, Ny, Nx), matching reshape_host
        """
        iz, iy, ix = np.meshgrid(
            np.arange(self.nz), np.arange(self.ny), np.arange(self.nx), indexing="ij"
        )
        return self.index_to_coord(ix, iy, iz)

    def same_geometry(self, other):
        """True if cell counts and cell sizes match (window offset ignored)."""
        return other is not None and self.size == other.size and self.cell_size == other.cell_size

    def shifted(self, axis, dx):
        """
        Mesh whose coordinate mapping follows a content shift of dx cells.

        After the shift cell i holds what used to be in cell i - dx, so the
        window offset moves by -dx cells along the axis.
        """
        if axis not in (C.X, C.Y, C.Z):
            raise RegionConfigError(f"shift axis must be one of {C.X}, {C.Y}, {C.Z}, have {axis}")
        offset = list(self.offset)
        offset[axis] -= dx * self.cell_size[axis]
        return replace(self, offset=tuple(offset))

    def __str__(self):
        return (f"{self.nx}x{self.ny}x{self.nz} cells of "
                f"{self.cx:g}x{self.cy:g}x{self.cz:g}")
