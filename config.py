"""
Configuration parameters for the bubble metaball renderer.

This module defines all engine parameters:
- Capacity (fixed-size bubble/group buffers)
- Clustering and smooth-blend constants
- Evaluation grid (field-space extent, gradient stencil)
- Interaction (default bubble size)
- Shading (gradient scale, light, refraction)
- Rendering (window, FPS)

All positions and radii are in field space: one unit == one grid cell
of the evaluation grid (== one pixel of the background image).
"""

import math

# ==============================================================================
# Capacity (fixed-size device buffers)
# ==============================================================================

MAX_BUBBLES = 1024          # Hard ceiling on live bubbles per tick
MAX_GROUPS = 1024           # Hard ceiling on groups per tick (<= MAX_BUBBLES in practice)

# ==============================================================================
# Clustering / smooth blend
# ==============================================================================

DEFAULT_SMOOTH_FACTOR = 50.0        # Smooth factor of singleton groups (never blended)
SMOOTH_FACTOR_NUMERATOR = 3000.0    # k = NUMERATOR / (1 + minD) for groups of 2+
                                    # Near-touching centers → k ≈ 3000 (strong blend)
                                    # Far-apart centers    → k small (weak blend)
SMOOTH_UNION_PRESCALE = 4.0         # k' = 4k inside smooth_union (visual tuning, keep exact)

# ==============================================================================
# Evaluation grid
# ==============================================================================

GRID_WIDTH = 800            # Default field-space extent (cells)
GRID_HEIGHT = 800

FAR_DISTANCE = 1.0e6        # Distance reported when there is no group at all

# Gradient stencil edge policy: neighbors outside the grid are clamped to the
# nearest edge cell (edge replication). Central difference keeps the /2.
GRADIENT_EDGE_MODE = "clamp"

EPS = 1e-8                  # normalize(v) = v / sqrt(v·v + EPS) → zero stays zero

# ==============================================================================
# Interaction
# ==============================================================================

DEFAULT_BUBBLE_RADIUS = 100.0   # Radius of bubbles created by double tap
DOUBLE_CLICK_SECONDS = 0.30     # Max interval between clicks of a double click
PINCH_DRAG_GAIN = 3.0           # run.py: RMB vertical drag → scale = exp(gain * dy)

# ==============================================================================
# Shading
# ==============================================================================

GRADIENT_SCALE = 30.0           # gradient_scale = GRADIENT_SCALE / texture size
LIGHT_DIRECTION_DEFAULT = (1.0 / math.sqrt(2.0), -1.0 / math.sqrt(2.0))  # normalize((1, -1))
INSIDE_HIGHLIGHT = 0.1          # Tint added to every occupied cell
REFRACTION_EDGE_WIDTH = 40.0    # Depth (cells) over which refraction fades to zero inside
SPECULAR_STRENGTH = 0.6         # Peak specular added along the lit rim
SPECULAR_SHININESS = 16.0       # Specular exponent

LIGHT_FEED_MAXSIZE = 64         # Pending sensor samples before the producer drops old ones
MOTION_UPDATE_INTERVAL = 1.0 / 60.0  # Sensor sample period (seconds)

# ==============================================================================
# Rendering
# ==============================================================================

FPS_TARGET = 60             # Target frames per second for GUI
PERF_EVERY = 120            # Print [PERF] telemetry every N frames


def print_config():
    """Dump the engine configuration with [Config] tags."""
    print(f"[Config] Capacity: MAX_BUBBLES={MAX_BUBBLES}, MAX_GROUPS={MAX_GROUPS}")
    print(f"[Config] Blend: default k={DEFAULT_SMOOTH_FACTOR}, "
          f"k=({SMOOTH_FACTOR_NUMERATOR:.0f})/(1+minD), prescale={SMOOTH_UNION_PRESCALE}")
    print(f"[Config] Grid: {GRID_WIDTH}×{GRID_HEIGHT} cells, gradient edge={GRADIENT_EDGE_MODE}")
    print(f"[Config] Shading: gradient scale={GRADIENT_SCALE}, highlight={INSIDE_HIGHLIGHT}, "
          f"edge width={REFRACTION_EDGE_WIDTH}")
