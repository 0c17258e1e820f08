"""
Region Map: Per-Cell Material Region Ids
Accelerator-resident byte map + definition history, kept consistent across
resizes and sliding-window shifts.

The resident buffer is the single source of truth. Host mirrors are
downloaded on demand and never kept across mutations.

Note on single-cell overrides: define_cell / set_cell write the resident map
directly and are NOT recorded in the definition history. Any later resize
replays the history only, so those overrides are dropped. Shifts move them
with the rest of the map but never recreate them at the boundary.
"""

import numpy as np

import region_map_config as C
import region_map_raster as raster
import region_map_shift as shifter
from region_map_buffer import TaichiBackend
from region_map_decode import Decoder, unit_map
from region_map_errors import RegionConfigError
from region_map_history import DefinitionHistory, check_region_id
from region_map_mesh import reshape_host
from region_map_shapes import Shape


class RegionMap:
    """
    Region ids (0-255) for every cell of the current mesh.

    Args:
        mesh_provider: callable returning the current Mesh, or None while the
            mesh is not configured
        backend: accelerator buffer backend (TaichiBackend by default)
    """

    name = "regions"
    unit = ""

    def __init__(self, mesh_provider, backend=None):
        self._mesh_provider = mesh_provider
        self.backend = TaichiBackend() if backend is None else backend
        self.history = DefinitionHistory()
        self._buffer = None
        self._scratch = None
        self._alloc_size = None
        self._unit_map = unit_map()

    # =========================================================================
    # Mesh & Buffer Lifecycle
    # =========================================================================

    @property
    def mesh(self):
        """Current mesh; raises if it has not been configured yet."""
        mesh = self._mesh_provider()
        if mesh is None:
            raise RegionConfigError("mesh not configured: set the mesh before defining regions")
        return mesh

    @property
    def allocated(self):
        return self._buffer is not None

    @property
    def buffer(self):
        """
        Resident buffer, allocated on first use.

        A fresh buffer starts as id 0 everywhere with the history replayed on
        top, so a map released earlier comes back consistent with it.
        """
        if self._buffer is None:
            self._alloc()
            self._replay()
        return self._buffer

    @property
    def scratch(self):
        """Work buffer the size of the resident map, kept until release."""
        self._check_size()
        if self._scratch is None:
            self._scratch = self.backend.allocate(self.mesh.ncell)
        return self._scratch

    def _alloc(self):
        mesh = self.mesh
        if C.VERBOSE:
            print(f"[REGIONS] alloc {mesh}")
        buf = self.backend.allocate(mesh.ncell)
        try:
            self.backend.fill(buf, C.DEFAULT_REGION)
        except Exception:
            self.backend.release(buf)
            raise
        self._buffer = buf
        self._alloc_size = mesh.size

    def resize(self):
        """
        Reallocate for the current mesh geometry and replay the history.

        The result equals defining the same history once at the new size.
        Single-cell overrides are lost.
        """
        mesh = self.mesh
        if C.VERBOSE:
            print(f"[REGIONS] re-alloc {mesh}")
        self.release()
        self._alloc()
        self._replay()

    def _replay(self):
        if len(self.history) == 0:
            return
        mesh = self.mesh
        if C.VERBOSE:
            print(f"[REGIONS] replaying {len(self.history)} definitions on {mesh}")
        host = self.host_list()
        for entry in self.history:
            raster.render(host, mesh, entry.region, entry.shape)
        self._upload(host)

    def release(self):
        """
        Free the resident and scratch buffers. A later access reallocates
        the map and replays the history.
        """
        scratch, self._scratch = self._scratch, None
        if scratch is not None:
            self.backend.release(scratch)
        if self._buffer is not None:
            buf = self._buffer
            self._buffer = None
            self._alloc_size = None
            self.backend.release(buf)

    def _check_size(self):
        if self._buffer is not None and self._alloc_size != self.mesh.size:
            raise RegionConfigError(
                f"mesh changed from {self._alloc_size} to {self.mesh.size} without resize()"
            )

    # =========================================================================
    # Definitions
    # =========================================================================

    def define_region(self, region, shape):
        """Define region (0-255) as everything inside shape; recorded for replay."""
        region = check_region_id(region)
        if not isinstance(shape, Shape):
            raise RegionConfigError(f"region shape must be a Shape, have {type(shape).__name__}")
        mesh = self.mesh
        self._check_size()
        # recorded only once painted, so replay never meets a failing shape
        self._render(region, shape, mesh)
        return self.history.append(region, shape)

    def define_cell(self, region, ix, iy, iz):
        """
        Set the region of one cell. Not recorded in the history, so it does
        not survive a resize.
        """
        self.set_cell(ix, iy, iz, check_region_id(region))

    def _render(self, region, shape, mesh):
        host = self.host_list()  # start from the current state
        raster.render(host, mesh, region, shape)
        self._upload(host)

    def _upload(self, host):
        if C.VERBOSE:
            print("[REGIONS] upload")
        self.backend.upload(host, self.buffer)

    # =========================================================================
    # Single-Cell Access
    # =========================================================================

    def set_cell(self, ix, iy, iz, region):
        """Direct write to the resident map (no host round trip)."""
        region = check_region_id(region)
        index = self.mesh.index(ix, iy, iz)
        self._check_size()
        self.backend.write_byte(self.buffer, index, region)

    def get_cell(self, ix, iy, iz):
        index = self.mesh.index(ix, iy, iz)
        self._check_size()
        return self.backend.read_byte(self.buffer, index)

    def region_at(self, x, y, z):
        """
        Region of a world coordinate from the history alone (newest first),
        independent of the possibly stale resident map.
        """
        return self.history.region_at(x, y, z)

    # =========================================================================
    # Sliding Window
    # =========================================================================

    def shift(self, dx, axis=C.X):
        """
        Translate the map by dx cells along axis.

        The mesh provider must already report the shifted window (see
        Mesh.shifted). A zero shift does nothing.
        """
        if axis not in (C.X, C.Y, C.Z):
            raise RegionConfigError(f"shift axis must be one of {C.X}, {C.Y}, {C.Z}, have {axis}")
        if int(dx) != dx:
            raise RegionConfigError(f"shift must be a whole number of cells, have {dx}")
        if dx == 0:
            return 0
        self._check_size()
        return shifter.shift_regions(self, int(dx), axis)

    # =========================================================================
    # Host Mirrors & Queries
    # =========================================================================

    def host_list(self):
        """Flat uint8 snapshot of the resident map (z-major)."""
        self._check_size()
        return self.backend.download(self.buffer)

    def host_array(self):
        """(Nz, Ny, Nx) snapshot of the resident map."""
        return reshape_host(self.host_list(), self.mesh.size)

    def volume(self, region):
        """Fraction (0..1) of cells currently carrying region."""
        region = check_region_id(region)
        host = self.host_list()
        return np.count_nonzero(host == region) / host.size

    def volumes(self):
        """Fractions for all NREGION ids from a single download."""
        host = self.host_list()
        return np.bincount(host, minlength=C.NREGION) / host.size

    # =========================================================================
    # Output
    # =========================================================================

    def decode(self, table):
        """Per-cell field table[id] for every cell; does not modify the map."""
        self._check_size()
        return Decoder(self.backend).decode(self.buffer, self.mesh, table)

    def output(self):
        """The regions quantity: each cell's id as float32 (identity table)."""
        return self.decode(self._unit_map)
