"""
Configuration for the Region Map
Material-region classification of a structured 3D mesh

All tunables, caps, and constants in one place.
"""

import numpy as np
import taichi as ti

# =============================================================================
# Architecture & Platform
# =============================================================================
ARCH = ti.gpu   # Metal on Mac, CUDA on NVIDIA, Vulkan otherwise (falls back to CPU)
VERBOSE = True  # print [REGIONS]/[SHIFT] progress lines

# =============================================================================
# Regions
# =============================================================================
NREGION = 256        # maximum number of regions (one byte per cell)
DEFAULT_REGION = 0   # "universe" / background id for fresh and exposed cells

# =============================================================================
# Mesh Axes
# =============================================================================
X = 0
Y = 1
Z = 2
AXIS_NAMES = ("x", "y", "z")

# =============================================================================
# Decoded Output
# =============================================================================
# Decoded per-cell fields are float32, like every other Taichi field we output
OUTPUT_DTYPE = ti.f32
OUTPUT_NP_DTYPE = np.float32

# =============================================================================
# Entry Script Defaults
# =============================================================================
DEMO_SIZE = (32, 32, 1)           # cells per axis
DEMO_CELL_SIZE = (5e-9, 5e-9, 5e-9)
DEMO_SHIFT = 4                    # window shift (cells) applied by the demo
