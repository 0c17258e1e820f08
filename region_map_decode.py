"""
Decoder: Region Ids -> Per-Cell Output Values
Lookup-table decode on the accelerator, plus per-region parameter tables
"""

import numpy as np

import region_map_config as C
from region_map_errors import RegionConfigError
from region_map_history import check_region_id


# =============================================================================
# Per-Region Parameter Tables
# =============================================================================

class RegionParam:
    """
    A material property with one value (or ncomp values) per region id.

    lut() gives the 256-entry table the decoder indexes with each cell's id.
    """

    def __init__(self, name, unit="", ncomp=1, default=0.0):
        if ncomp < 1:
            raise RegionConfigError(f"{name}: ncomp must be >= 1, have {ncomp}")
        self.name = name
        self.unit = unit
        self.ncomp = ncomp
        shape = (C.NREGION,) if ncomp == 1 else (C.NREGION, ncomp)
        self._table = np.empty(shape, dtype=C.OUTPUT_NP_DTYPE)
        self.set_all(default)

    def _value(self, value):
        value = np.asarray(value, dtype=C.OUTPUT_NP_DTYPE)
        if self.ncomp > 1 and value.shape not in ((), (self.ncomp,)):
            raise RegionConfigError(f"{self.name}: need {self.ncomp} components, have {value.shape}")
        if self.ncomp == 1 and value.shape != ():
            raise RegionConfigError(f"{self.name}: need a scalar, have {value.shape}")
        return value

    def set_all(self, value):
        self._table[...] = self._value(value)

    def set_region(self, region, value):
        self._table[check_region_id(region)] = self._value(value)

    def get_region(self, region):
        v = self._table[check_region_id(region)]
        return float(v) if self.ncomp == 1 else v.copy()

    def lut(self):
        return self._table.copy()

    def __repr__(self):
        return f"RegionParam({self.name!r}, unit={self.unit!r}, ncomp={self.ncomp})"


def unit_map():
    """Identity table (id -> id), used for the diagnostic regions output."""
    param = RegionParam("unit")
    for r in range(C.NREGION):
        param.set_region(r, r)
    return param


# =============================================================================
# Decoder
# =============================================================================

def as_lut(table):
    """Normalise a RegionParam or array-like into a (256,) or (256, k) table."""
    if isinstance(table, RegionParam):
        return table.lut()
    lut = np.asarray(table, dtype=C.OUTPUT_NP_DTYPE)
    if lut.ndim not in (1, 2) or lut.shape[0] != C.NREGION:
        raise RegionConfigError(f"lookup table must have {C.NREGION} rows, have shape {lut.shape}")
    return lut


class Decoder:
    """
    Read-only transform of the resident map through a lookup table.

    The decoded field is produced on the accelerator and downloaded as a
    (Nz, Ny, Nx) or (Nz, Ny, Nx, k) array. Scratch buffers are released
    before returning.
    """

    def __init__(self, backend):
        self.backend = backend

    def decode(self, regions_buffer, mesh, table):
        lut = as_lut(table)
        ncomp = 1 if lut.ndim == 1 else lut.shape[1]
        lut_buf = self.backend.allocate(C.NREGION, dtype=C.OUTPUT_DTYPE, ncomp=ncomp)
        try:
            out_buf = self.backend.allocate(mesh.ncell, dtype=C.OUTPUT_DTYPE, ncomp=ncomp)
            try:
                self.backend.upload(lut, lut_buf)
                self.backend.decode(out_buf, lut_buf, regions_buffer)
                out = self.backend.download(out_buf)
            finally:
                self.backend.release(out_buf)
        finally:
            self.backend.release(lut_buf)
        nx, ny, nz = mesh.size
        return out.reshape((nz, ny, nx) + out.shape[1:])
