"""
Smooth-blend distance math for bubble metaballs.

All operators are Taichi functions so every kernel (grid sweep, point
probe, shading) evaluates exactly the same arithmetic in f32:

1. bubble_sdf:       |p - origin| - radius
2. op_union:         min(d1, d2) (hard union)
3. op_smooth_union:  polynomial smooth minimum, k pre-scaled by 4
4. group_sdf:        fold of a group keyed on its member count
                       1  → bubble distance
                       2  → smooth union with the group's smooth factor
                       3+ → hard-union fold (no smoothing)

Python-scope callers use hard_union() / smooth_union(), which launch a
scalar kernel around the same functions.
"""

import taichi as ti
from config import SMOOTH_UNION_PRESCALE


@ti.func
def bubble_sdf(origin: ti.math.vec2, radius: ti.f32, p: ti.math.vec2) -> ti.f32:
    """Signed distance from p to the circle (origin, radius)."""
    return (p - origin).norm() - radius


@ti.func
def op_union(d1: ti.f32, d2: ti.f32) -> ti.f32:
    return ti.min(d1, d2)


@ti.func
def op_smooth_union(d1: ti.f32, d2: ti.f32, k: ti.f32) -> ti.f32:
    """
    Polynomial smooth minimum.

    k' = 4k, h = max(k' - |d1 - d2|, 0), result = min(d1, d2) - h² / (4k').
    Equals min(d1, d2) once the fields are further apart than k'.
    k must be > 0 (checked when Taichi runs with debug=True).
    """
    assert k > 0.0
    k4 = k * SMOOTH_UNION_PRESCALE
    h = ti.max(k4 - ti.abs(d1 - d2), 0.0)
    return ti.min(d1, d2) - h * h * 0.25 / k4


@ti.func
def group_sdf(origin: ti.template(), radius: ti.template(),
              start: ti.i32, count: ti.i32, k: ti.f32, p: ti.math.vec2) -> ti.f32:
    """
    Blended distance of one group.

    Args:
        origin, radius: Flattened bubble fields (group-ordered)
        start, count: Member range [start, start + count)
        k: Group smooth factor (only used for 2-member groups)
        p: Query point in field space

    Returns:
        Distance of p to the group's blended outline
    """
    d = bubble_sdf(origin[start], radius[start], p)
    if count == 2:
        d = op_smooth_union(d, bubble_sdf(origin[start + 1], radius[start + 1], p), k)
    elif count > 2:
        # 3+ members fold with hard union only
        for i in range(start + 1, start + count):
            d = op_union(d, bubble_sdf(origin[i], radius[i], p))
    return d


# ==============================================================================
# Python-scope wrappers
# ==============================================================================

@ti.kernel
def _hard_union(d1: ti.f32, d2: ti.f32) -> ti.f32:
    return op_union(d1, d2)


@ti.kernel
def _smooth_union(d1: ti.f32, d2: ti.f32, k: ti.f32) -> ti.f32:
    return op_smooth_union(d1, d2, k)


def hard_union(d1, d2):
    return _hard_union(d1, d2)


def smooth_union(d1, d2, k):
    """Smooth union of two distances; k <= 0 is a caller error."""
    assert k > 0, f"smooth factor must be positive, got {k}"
    return _smooth_union(d1, d2, k)
