"""
Accelerator Buffers for the Region Map
Taichi fields with explicit ownership: allocate / release / transfer / shift

Each buffer lives in its own SNode tree (ti.FieldsBuilder), so releasing a
buffer destroys exactly that tree and nothing else.
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti

import region_map_config as C
from region_map_errors import RegionInvariantError
from region_map_mesh import cell_index

# =============================================================================
# Taichi Runtime
# =============================================================================

_initialized = False


def init(arch=None):
    """Initialize Taichi once (later calls are no-ops)."""
    global _initialized
    if _initialized:
        return
    ti.init(arch=C.ARCH if arch is None else arch)
    _initialized = True
    if C.VERBOSE:
        print(f"[TAICHI] Initialized with backend: {ti.cfg.arch}")


def np_dtype(dtype):
    """Host dtype matching a field dtype we allocate."""
    if dtype == ti.u8:
        return np.uint8
    if dtype == ti.i32:
        return np.int32
    if dtype == ti.f32:
        return np.float32
    if dtype == ti.f64:
        return np.float64
    raise ValueError(f"unsupported buffer dtype: {dtype}")


# =============================================================================
# Kernels
# =============================================================================

@ti.kernel
def shift_kernel(dst: ti.template(), src: ti.template(),
                 nx: ti.i32, ny: ti.i32, nz: ti.i32,
                 axis: ti.i32, dx: ti.i32, fill: ti.i32):
    """
    dst[i] = src[i - dx] along axis; cells entering the window get fill.
    """
    for i in range(nx * ny * nz):
        ix = i % nx
        iy = (i // nx) % ny
        iz = i // (nx * ny)
        sx = ix
        sy = iy
        sz = iz
        if axis == 0:
            sx = ix - dx
        elif axis == 1:
            sy = iy - dx
        else:
            sz = iz - dx
        if 0 <= sx < nx and 0 <= sy < ny and 0 <= sz < nz:
            dst[i] = src[cell_index(sx, sy, sz, nx, ny)]
        else:
            dst[i] = ti.cast(fill, ti.u8)


@ti.kernel
def decode_kernel(dst: ti.template(), lut: ti.template(), regions: ti.template()):
    """dst[i] = lut[regions[i]]"""
    for i in regions:
        dst[i] = lut[ti.cast(regions[i], ti.i32)]


# =============================================================================
# Buffer Handle
# =============================================================================

@dataclass
class Buffer:
    """One accelerator-resident field plus the SNode tree that owns it."""

    field: object
    tree: object
    size: int
    dtype: object = ti.u8
    ncomp: int = 1
    released: bool = False

    @property
    def host_shape(self):
        return (self.size,) if self.ncomp == 1 else (self.size, self.ncomp)


class TaichiBackend:
    """
    Buffer operations the Region Map depends on.

    All transfers are blocking; Taichi errors propagate to the caller.
    """

    def allocate(self, size, dtype=ti.u8, ncomp=1):
        init()
        fb = ti.FieldsBuilder()
        if ncomp == 1:
            f = ti.field(dtype=dtype)
        else:
            f = ti.Vector.field(ncomp, dtype=dtype)
        fb.dense(ti.i, size).place(f)
        tree = fb.finalize()
        return Buffer(field=f, tree=tree, size=size, dtype=dtype, ncomp=ncomp)

    def release(self, buf):
        self._check(buf)
        buf.tree.destroy()
        buf.released = True

    def fill(self, buf, value):
        self._check(buf)
        buf.field.fill(value)

    def upload(self, host, buf):
        self._check(buf)
        host = np.ascontiguousarray(host, dtype=np_dtype(buf.dtype))
        if host.size != buf.size * buf.ncomp:
            raise RegionInvariantError(
                f"upload of {host.size} values into a buffer of {buf.size * buf.ncomp}"
            )
        buf.field.from_numpy(host.reshape(buf.host_shape))

    def download(self, buf):
        self._check(buf)
        return buf.field.to_numpy()

    def write_byte(self, buf, index, value):
        self._check(buf)
        buf.field[index] = value

    def read_byte(self, buf, index):
        self._check(buf)
        return int(buf.field[index])

    def copy(self, dst, src):
        self._check(dst)
        self._check(src)
        dst.field.copy_from(src.field)

    def shift_window(self, dst, src, mesh, axis, dx, fill):
        self._check(dst)
        self._check(src)
        nx, ny, nz = mesh.size
        shift_kernel(dst.field, src.field, nx, ny, nz, axis, dx, fill)

    def decode(self, dst, lut, regions):
        self._check(dst)
        self._check(lut)
        self._check(regions)
        decode_kernel(dst.field, lut.field, regions.field)

    @staticmethod
    def _check(buf):
        if buf.released:
            raise RegionInvariantError("buffer used after release")
