"""
Session: One Simulation's Mesh and Region Map
Owns the mesh provider and the single resident region buffer.
"""

import region_map_config as C
from region_map_core import RegionMap
from region_map_errors import RegionConfigError
from region_map_mesh import Mesh


class Session:
    """
    Mesh + RegionMap for one simulation run.

    Usage:
        with Session() as s:
            s.set_mesh(32, 32, 1, 5e-9, 5e-9, 5e-9)
            s.regions.define_region(1, XRange(hi=80e-9))
            s.shift(4)
    """

    def __init__(self, backend=None):
        self._mesh = None
        self.regions = RegionMap(lambda: self._mesh, backend=backend)

    @property
    def mesh(self):
        return self._mesh

    def set_mesh(self, nx, ny, nz, cx, cy, cz):
        """
        Configure or change the mesh geometry.

        The window offset carries over. If the geometry changed and the
        region map already exists, it is reallocated and its history replayed.
        """
        offset = (0.0, 0.0, 0.0) if self._mesh is None else self._mesh.offset
        mesh = Mesh(nx, ny, nz, cx, cy, cz, offset=offset)
        changed = not mesh.same_geometry(self._mesh)
        self._mesh = mesh
        if changed and self.regions.allocated:
            self.regions.resize()
        return mesh

    def shift(self, dx, axis=C.X):
        """Slide the window by dx cells along axis and shift the region map."""
        if int(dx) != dx:
            raise RegionConfigError(f"shift must be a whole number of cells, have {dx}")
        if dx == 0:
            return 0
        before = self.regions.mesh
        self._mesh = before.shifted(axis, dx)
        try:
            return self.regions.shift(dx, axis)
        except Exception:
            self._mesh = before
            raise

    def close(self):
        self.regions.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
