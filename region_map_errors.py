"""
Errors raised by the Region Map
"""


class RegionMapError(Exception):
    """Base class for region map failures."""


class RegionConfigError(RegionMapError, ValueError):
    """
    Invalid configuration: region id outside [0, NREGION), cell index outside
    the mesh, bad mesh geometry, or a mutation attempted before the mesh is set.
    """


class RegionInvariantError(RegionMapError, RuntimeError):
    """Internal bug: flat/3D length mismatch or use of a released buffer."""
