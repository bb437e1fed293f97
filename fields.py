"""
Field evaluation and compositing on the evaluation grid.

SDFCompositor owns the device-side snapshot of one tick's clustering and
the two output fields:

- sdf[x, y]       signed distance at field-space point (x, y)
- occupied[x, y]  1 if a group contains (x, y), else 0
- gradient[x, y]  (gx, gy, distance): normalized central difference of sdf

Tick pipeline:
1. upload(clustering):  copy groups + flattened bubbles into device fields
2. compute_sdf:         parallel sweep, first containing group wins
3. compute_gradient:    parallel sweep reading the finished sdf

Steps 2 and 3 are separate kernel launches. Taichi runs launches in order,
so every gradient read sees the final scalar value of the same tick.

Gradient stencil at the grid border: neighbor indices are clamped to the
edge (edge replication), the /2 denominator is kept.

Point probes (evaluate) run the same Taichi function as the grid sweep on
a single point, so hit-testing and rendering can never disagree.
"""

import numpy as np
import taichi as ti

from bubble import CapacityError, OutOfGridError
from config import MAX_BUBBLES, MAX_GROUPS, FAR_DISTANCE, EPS
from sdf import group_sdf


@ti.data_oriented
class SDFCompositor:
    """
    Scalar + gradient field builder for a fixed-size evaluation grid.

    Must be constructed after ti.init().
    """

    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)

        # Clustering snapshot (fixed capacity, like a uniform buffer)
        self.bubble_origin = ti.Vector.field(2, dtype=ti.f32, shape=MAX_BUBBLES)
        self.bubble_radius = ti.field(dtype=ti.f32, shape=MAX_BUBBLES)
        self.group_start = ti.field(dtype=ti.i32, shape=MAX_GROUPS)
        self.group_count = ti.field(dtype=ti.i32, shape=MAX_GROUPS)
        self.group_smooth = ti.field(dtype=ti.f32, shape=MAX_GROUPS)
        self.n_groups = ti.field(dtype=ti.i32, shape=())

        # Outputs
        self.sdf = ti.field(dtype=ti.f32, shape=(self.width, self.height))
        self.occupied = ti.field(dtype=ti.i32, shape=(self.width, self.height))
        self.gradient = ti.Vector.field(3, dtype=ti.f32, shape=(self.width, self.height))

        # Single-point probe result: (distance, inside)
        self.probe = ti.Vector.field(2, dtype=ti.f32, shape=())

        self.n_bubbles = 0
        self.extent = (self.width, self.height)

    # ==========================================================================
    # Snapshot upload
    # ==========================================================================

    def upload(self, clustering):
        """
        Copy one tick's clustering into device fields.

        Raises:
            CapacityError: clustering larger than the device buffers
        """
        groups, bubbles = clustering
        if len(bubbles) > MAX_BUBBLES:
            raise CapacityError(f"{len(bubbles)} bubbles exceeds MAX_BUBBLES={MAX_BUBBLES}")
        if len(groups) > MAX_GROUPS:
            raise CapacityError(f"{len(groups)} groups exceeds MAX_GROUPS={MAX_GROUPS}")

        origin = np.zeros((MAX_BUBBLES, 2), dtype=np.float32)
        radius = np.zeros(MAX_BUBBLES, dtype=np.float32)
        for i, b in enumerate(bubbles):
            origin[i] = b.origin
            radius[i] = b.radius

        start = np.zeros(MAX_GROUPS, dtype=np.int32)
        count = np.zeros(MAX_GROUPS, dtype=np.int32)
        smooth = np.zeros(MAX_GROUPS, dtype=np.float32)
        for g, group in enumerate(groups):
            start[g] = group.start
            count[g] = group.count
            smooth[g] = group.smooth_factor

        self.bubble_origin.from_numpy(origin)
        self.bubble_radius.from_numpy(radius)
        self.group_start.from_numpy(start)
        self.group_count.from_numpy(count)
        self.group_smooth.from_numpy(smooth)
        self.n_groups[None] = len(groups)
        self.n_bubbles = len(bubbles)

    # ==========================================================================
    # Field evaluator
    # ==========================================================================

    @ti.func
    def evaluate_groups(self, p: ti.math.vec2) -> ti.math.vec2:
        """
        Walk groups in order; the first group containing p wins.

        Returns:
            (distance, inside) where inside is 1.0 or 0.0. Without a
            containing group the last evaluated distance is returned.
        """
        d = FAR_DISTANCE
        inside = 0.0
        for g in range(self.n_groups[None]):
            d = group_sdf(self.bubble_origin, self.bubble_radius,
                          self.group_start[g], self.group_count[g],
                          self.group_smooth[g], p)
            if d <= 0.0:
                inside = 1.0
                break
        return ti.Vector([d, inside])

    @ti.kernel
    def _evaluate_point(self, px: ti.f32, py: ti.f32):
        # Single-iteration outer loop keeps the group walk (and its break) serial
        for _ in range(1):
            self.probe[None] = self.evaluate_groups(ti.Vector([px, py]))

    def evaluate(self, point):
        """
        Single-point query in field space.

        Evaluates the uploaded groups directly, so it covers the whole
        allocated grid regardless of the extent last passed to
        build_fields(). Use distance_at() to read the built extent.

        Args:
            point: (x, y) in field space, must lie in [0, width) × [0, height)

        Returns:
            (distance, inside) with inside a bool

        Raises:
            OutOfGridError: point outside the grid
        """
        x, y = float(point[0]), float(point[1])
        if not (0.0 <= x < self.width and 0.0 <= y < self.height):
            raise OutOfGridError(f"point ({x}, {y}) outside grid {self.width}×{self.height}")
        self._evaluate_point(x, y)
        result = self.probe[None]
        return float(result[0]), result[1] > 0.5

    # ==========================================================================
    # Grid passes
    # ==========================================================================

    @ti.kernel
    def compute_sdf(self, width: ti.i32, height: ti.i32):
        """Pass 1: scalar distance + occupancy for every cell of the extent."""
        for x, y in ti.ndrange(width, height):
            p = ti.Vector([ti.cast(x, ti.f32), ti.cast(y, ti.f32)])
            r = self.evaluate_groups(p)
            self.sdf[x, y] = r[0]
            self.occupied[x, y] = ti.cast(r[1], ti.i32)

    @ti.kernel
    def compute_gradient(self, width: ti.i32, height: ti.i32):
        """
        Pass 2: central-difference gradient of the finished scalar field.

        dX = (sdf[x+1, y] - sdf[x-1, y]) / 2, dY likewise, neighbors clamped
        to the extent. Output packs (normalize(dX, dY), distance).
        """
        for x, y in ti.ndrange(width, height):
            xl = ti.max(x - 1, 0)
            xr = ti.min(x + 1, width - 1)
            yl = ti.max(y - 1, 0)
            yr = ti.min(y + 1, height - 1)

            dx = (self.sdf[xr, y] - self.sdf[xl, y]) * 0.5
            dy = (self.sdf[x, yr] - self.sdf[x, yl]) * 0.5

            inv_len = 1.0 / ti.sqrt(dx * dx + dy * dy + EPS)
            self.gradient[x, y] = ti.Vector([dx * inv_len, dy * inv_len, self.sdf[x, y]])

    def build_fields(self, extent=None):
        """
        Build the scalar field, then the gradient field.

        Args:
            extent: (width, height) sub-extent to sweep, default full grid

        Returns:
            (sdf, gradient) Taichi fields

        Raises:
            OutOfGridError: extent larger than the allocated grid
        """
        if extent is None:
            extent = (self.width, self.height)
        width, height = int(extent[0]), int(extent[1])
        if width < 1 or height < 1 or width > self.width or height > self.height:
            raise OutOfGridError(f"extent {width}×{height} outside grid {self.width}×{self.height}")

        self.extent = (width, height)
        self.compute_sdf(width, height)
        self.compute_gradient(width, height)
        return self.sdf, self.gradient

    # ==========================================================================
    # Read-back helpers
    # ==========================================================================

    def _check_cell(self, x, y):
        if not (0 <= x < self.extent[0] and 0 <= y < self.extent[1]):
            raise OutOfGridError(f"cell ({x}, {y}) outside extent {self.extent[0]}×{self.extent[1]}")

    def distance_at(self, x: int, y: int) -> float:
        self._check_cell(x, y)
        return float(self.sdf[x, y])

    def gradient_at(self, x: int, y: int):
        """Return (gx, gy, distance) of a built cell."""
        self._check_cell(x, y)
        g = self.gradient[x, y]
        return float(g[0]), float(g[1]), float(g[2])

    def to_numpy(self):
        """Copy the built extent back: (sdf [w, h], occupied [w, h], gradient [w, h, 3])."""
        w, h = self.extent
        return (self.sdf.to_numpy()[:w, :h],
                self.occupied.to_numpy()[:w, :h],
                self.gradient.to_numpy()[:w, :h])
