"""
Main Entry Point: Region Map Demo
Define → Shift → Report
"""

import numpy as np

import region_map_config as C
from region_map_session import Session
from region_map_shapes import Cylinder, XRange


def main(size=C.DEMO_SIZE, cell_size=C.DEMO_CELL_SIZE, dx=C.DEMO_SHIFT):
    """
    Main entry point for the demo.

    Steps:
        1. Configure the mesh
        2. Define a left slab and a disc as regions 1 and 2
        3. Slide the window by dx cells
        4. Report region volumes before and after

    Returns:
        (volumes before the shift, volumes after the shift), each of length NREGION
    """
    print("\n" + "=" * 60)
    print("Region Map")
    print("Define → Shift → Report")
    print("=" * 60 + "\n")

    nx, ny, nz = size
    cx, cy, cz = cell_size
    with Session() as s:
        mesh = s.set_mesh(nx, ny, nz, cx, cy, cz)
        wx, wy, wz = mesh.world_size

        print("[INIT] Defining regions...")
        s.regions.define_region(1, XRange(hi=0.25 * wx))
        s.regions.define_region(2, Cylinder(0.5 * min(wx, wy), wz, center=(0.5 * wx, 0.5 * wy, 0.5 * wz)))
        before = s.regions.volumes()
        _report("before shift", before)

        print(f"[SHIFT] Sliding window by {dx} cells...")
        s.shift(dx)
        after = s.regions.volumes()
        _report("after shift", after)

    print("\nDone.")
    return before, after


def _report(label, volumes):
    used = np.flatnonzero(volumes)
    parts = "  ".join(f"#{r}={volumes[r]:.3f}" for r in used)
    print(f"[REPORT] {label}: {parts}  (sum={volumes.sum():.3f})")


if __name__ == "__main__":
    main()
