"""
Rasterizer: Paint a Shape's Region Id onto the Host Mirror
Painter's algorithm (last definition covering a cell wins)
"""

import region_map_config as C
from region_map_mesh import reshape_host


def render(host, mesh, region, shape):
    """
    Overwrite every cell whose centre lies inside shape with region.

    Cells outside the shape keep their current id, so host must be a mirror
    of the current map, not a blank one.

    Args:
        host: flat uint8 host mirror (modified in place)
        mesh: Mesh giving the cell-centre coordinates
        region: region id
        shape: Shape

    Returns:
        number of cells painted
    """
    arr = reshape_host(host, mesh.size)
    x, y, z = mesh.cell_centers()
    inside = shape(x, y, z)
    arr[inside] = region
    count = int(inside.sum())
    if C.VERBOSE:
        print(f"[REGIONS] render id={region} shape={shape!r} cells={count}/{mesh.ncell}")
    return count
