"""
Shapes: Inside/Outside Predicates over World Coordinates
Analytic primitives, explicit cell masks, boolean combinations, transforms

Every shape evaluates scalars as well as numpy arrays, so the rasterizer can
classify a whole mesh in one call:

    inside = shape(x, y, z)      # x, y, z of shape (Nz, Ny, Nx) -> bool array
    shape.contains(1e-9, 0, 0)   # single point -> bool

Shapes are frozen dataclasses: the definition history stores values that can
be printed and compared, not opaque closures.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Tuple

import numpy as np

from region_map_errors import RegionConfigError
from region_map_mesh import Mesh


def _shape_of(x, y, z):
    return np.broadcast(x, y, z).shape


# =============================================================================
# Base Class
# =============================================================================

class Shape:
    """Capability evaluate(x, y, z) -> bool (element-wise on arrays)."""

    def evaluate(self, x, y, z):
        raise NotImplementedError

    def __call__(self, x, y, z):
        return self.evaluate(x, y, z)

    def contains(self, x, y, z):
        """Scalar inside test used for single-point lookups."""
        return bool(self.evaluate(x, y, z))

    # Boolean combinations
    def __or__(self, other):
        return Union(self, other)

    def __and__(self, other):
        return Intersection(self, other)

    def __sub__(self, other):
        return Difference(self, other)

    def __xor__(self, other):
        return Xor(self, other)

    def __invert__(self):
        return Inverse(self)

    # Transforms
    def translate(self, dx, dy, dz):
        return Translate(self, dx, dy, dz)

    def scale(self, sx, sy, sz):
        return Scale(self, sx, sy, sz)

    def rotate_z(self, theta):
        return RotateZ(self, theta)


# =============================================================================
# Analytic Primitives
# =============================================================================

@dataclass(frozen=True)
class Universe(Shape):
    """Everything is inside."""

    def evaluate(self, x, y, z):
        return np.ones(_shape_of(x, y, z), dtype=bool)


@dataclass(frozen=True)
class Predicate(Shape):
    """
    Arbitrary user predicate f(x, y, z) -> bool.

    With vectorized=True (default) f receives whole coordinate arrays and must
    use numpy operators; otherwise it is applied point by point.
    """

    fn: Callable
    name: str = "predicate"
    vectorized: bool = True

    def evaluate(self, x, y, z):
        if self.vectorized:
            inside = np.asarray(self.fn(x, y, z), dtype=bool)
            return np.broadcast_to(inside, _shape_of(x, y, z))
        return np.vectorize(self.fn, otypes=[bool])(x, y, z)

    def __repr__(self):
        return f"Predicate({self.name})"


@dataclass(frozen=True)
class XRange(Shape):
    """lo <= x < hi"""

    lo: float = -math.inf
    hi: float = math.inf

    def evaluate(self, x, y, z):
        inside = (np.asarray(x) >= self.lo) & (np.asarray(x) < self.hi)
        return np.broadcast_to(inside, _shape_of(x, y, z))


@dataclass(frozen=True)
class YRange(Shape):
    """lo <= y < hi"""

    lo: float = -math.inf
    hi: float = math.inf

    def evaluate(self, x, y, z):
        inside = (np.asarray(y) >= self.lo) & (np.asarray(y) < self.hi)
        return np.broadcast_to(inside, _shape_of(x, y, z))


@dataclass(frozen=True)
class ZRange(Shape):
    """lo <= z < hi"""

    lo: float = -math.inf
    hi: float = math.inf

    def evaluate(self, x, y, z):
        inside = (np.asarray(z) >= self.lo) & (np.asarray(z) < self.hi)
        return np.broadcast_to(inside, _shape_of(x, y, z))


@dataclass(frozen=True)
class Cuboid(Shape):
    """Axis-aligned box with edge lengths (sx, sy, sz) around center."""

    sx: float
    sy: float
    sz: float
    center: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def evaluate(self, x, y, z):
        cx, cy, cz = self.center
        return ((np.abs(np.asarray(x) - cx) <= 0.5 * self.sx)
                & (np.abs(np.asarray(y) - cy) <= 0.5 * self.sy)
                & (np.abs(np.asarray(z) - cz) <= 0.5 * self.sz))


@dataclass(frozen=True)
class Ellipsoid(Shape):
    """Ellipsoid with diameters (dx, dy, dz) around center."""

    dx: float
    dy: float
    dz: float
    center: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def evaluate(self, x, y, z):
        cx, cy, cz = self.center
        u = (np.asarray(x) - cx) / (0.5 * self.dx)
        v = (np.asarray(y) - cy) / (0.5 * self.dy)
        w = (np.asarray(z) - cz) / (0.5 * self.dz)
        return u * u + v * v + w * w <= 1.0


@dataclass(frozen=True)
class Cylinder(Shape):
    """Cylinder along z with given diameter and height, around center."""

    diameter: float
    height: float
    center: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def evaluate(self, x, y, z):
        cx, cy, cz = self.center
        r = 0.5 * self.diameter
        u = np.asarray(x) - cx
        v = np.asarray(y) - cy
        return (u * u + v * v <= r * r) & (np.abs(np.asarray(z) - cz) <= 0.5 * self.height)


@dataclass(frozen=True)
class Layer(Shape):
    """Cell layers iz1 <= iz < iz2 of the given mesh."""

    mesh: Mesh
    iz1: int
    iz2: int

    def evaluate(self, x, y, z):
        _, _, iz = self.mesh.coord_to_index(x, y, z)
        inside = (iz >= self.iz1) & (iz < self.iz2)
        return np.broadcast_to(inside, _shape_of(x, y, z))


# =============================================================================
# Explicit Cell-List Mask
# =============================================================================

@dataclass(frozen=True)
class CellMask(Shape):
    """
    Explicit list of cells of the mesh the mask was built for.

    The cells are fixed in world space: after a resize or window shift the
    mask still covers the same physical volume.
    """

    mesh: Mesh
    cells: Tuple[Tuple[int, int, int], ...] = field(default_factory=tuple)

    def __post_init__(self):
        cells = tuple(tuple(int(i) for i in c) for c in self.cells)
        for ix, iy, iz in cells:
            self.mesh.index(ix, iy, iz)  # bounds check
        object.__setattr__(self, "cells", cells)

    def evaluate(self, x, y, z):
        shape = _shape_of(x, y, z)
        if not self.cells:
            return np.zeros(shape, dtype=bool)
        nx, ny, nz = self.mesh.size
        ix, iy, iz = (np.broadcast_to(i, shape) for i in self.mesh.coord_to_index(x, y, z))
        valid = (ix >= 0) & (ix < nx) & (iy >= 0) & (iy < ny) & (iz >= 0) & (iz < nz)
        flat = np.where(valid, (iz * ny + iy) * nx + ix, -1)
        wanted = np.array([self.mesh.index(*c) for c in self.cells], dtype=np.int64)
        return valid & np.isin(flat, wanted)


# =============================================================================
# Boolean Combinations
# =============================================================================

@dataclass(frozen=True)
class Union(Shape):
    a: Shape
    b: Shape

    def evaluate(self, x, y, z):
        return np.logical_or(self.a(x, y, z), self.b(x, y, z))


@dataclass(frozen=True)
class Intersection(Shape):
    a: Shape
    b: Shape

    def evaluate(self, x, y, z):
        return np.logical_and(self.a(x, y, z), self.b(x, y, z))


@dataclass(frozen=True)
class Difference(Shape):
    """Inside a but not inside b."""

    a: Shape
    b: Shape

    def evaluate(self, x, y, z):
        return np.logical_and(self.a(x, y, z), np.logical_not(self.b(x, y, z)))


@dataclass(frozen=True)
class Xor(Shape):
    a: Shape
    b: Shape

    def evaluate(self, x, y, z):
        return np.logical_xor(self.a(x, y, z), self.b(x, y, z))


@dataclass(frozen=True)
class Inverse(Shape):
    a: Shape

    def evaluate(self, x, y, z):
        return np.logical_not(self.a(x, y, z))


# =============================================================================
# Transforms
# =============================================================================

@dataclass(frozen=True)
class Translate(Shape):
    a: Shape
    dx: float
    dy: float
    dz: float

    def evaluate(self, x, y, z):
        return self.a(np.asarray(x) - self.dx, np.asarray(y) - self.dy, np.asarray(z) - self.dz)


@dataclass(frozen=True)
class Scale(Shape):
    a: Shape
    sx: float
    sy: float
    sz: float

    def __post_init__(self):
        if self.sx == 0 or self.sy == 0 or self.sz == 0:
            raise RegionConfigError(f"scale factors must be non-zero, have ({self.sx}, {self.sy}, {self.sz})")

    def evaluate(self, x, y, z):
        return self.a(np.asarray(x) / self.sx, np.asarray(y) / self.sy, np.asarray(z) / self.sz)


@dataclass(frozen=True)
class RotateZ(Shape):
    """Rotate the shape by theta (radians) around the z axis."""

    a: Shape
    theta: float

    def evaluate(self, x, y, z):
        c = math.cos(self.theta)
        s = math.sin(self.theta)
        x = np.asarray(x)
        y = np.asarray(y)
        return self.a(c * x + s * y, -s * x + c * y, z)
