"""
Refraction-style shading of a background image through the bubble field.

For every cell:
- outside any shape: background unchanged
- inside: background sampled at an offset along the SDF gradient, the
  offset fading from full strength at the rim to zero EDGE_WIDTH cells deep,
  plus the occupancy tint and a specular rim lit from the light direction

The background is a (width, height, 3) float image in [0, 1], laid out
like the evaluation grid (x first, y up).
"""

import numpy as np
import taichi as ti

from config import (INSIDE_HIGHLIGHT, REFRACTION_EDGE_WIDTH,
                    SPECULAR_STRENGTH, SPECULAR_SHININESS)


def make_background(width, height, seed=0):
    """Procedural water-like background (used when no image is given)."""
    rng = np.random.default_rng(seed)
    x = np.linspace(0.0, 1.0, width, dtype=np.float32)[:, None]
    y = np.linspace(0.0, 1.0, height, dtype=np.float32)[None, :]
    phase = rng.uniform(0.0, 2.0 * np.pi, size=3).astype(np.float32)

    ripple = 0.5 + 0.25 * np.sin(18.0 * x + 7.0 * y + phase[0]) * np.cos(11.0 * y - 5.0 * x + phase[1])
    ripple += 0.1 * np.sin(40.0 * (x + y) + phase[2])

    img = np.empty((width, height, 3), dtype=np.float32)
    img[..., 0] = 0.10 + 0.25 * ripple
    img[..., 1] = 0.35 + 0.35 * ripple
    img[..., 2] = 0.55 + 0.40 * ripple
    return np.clip(img, 0.0, 1.0)


def load_background(path):
    """Load an image file as a float (width, height, 3) array."""
    img = ti.tools.imread(path)
    if img.ndim == 2:
        img = np.stack([img] * 3, axis=-1)
    return img[..., :3].astype(np.float32) / 255.0


@ti.data_oriented
class RefractionShader:
    """Composites the gradient field over a background image."""

    def __init__(self, background):
        width, height = background.shape[0], background.shape[1]
        self.width = width
        self.height = height
        self.background = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))
        self.image = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))
        self.background.from_numpy(np.ascontiguousarray(background, dtype=np.float32))

    @ti.kernel
    def _shade(self, gradient: ti.template(), occupied: ti.template(),
               light: ti.math.vec2, scale: ti.math.vec2, width: ti.i32, height: ti.i32):
        for x, y in ti.ndrange(width, height):
            c = self.background[x, y]
            if occupied[x, y] == 1:
                g = gradient[x, y]
                n = ti.Vector([g[0], g[1]])
                d = g[2]

                # 1 at the rim, 0 once EDGE_WIDTH cells deep
                t = ti.min(ti.max(1.0 + d / REFRACTION_EDGE_WIDTH, 0.0), 1.0)

                offset = n * scale * ti.Vector([ti.cast(width, ti.f32), ti.cast(height, ti.f32)]) * t
                sx = ti.min(ti.max(ti.cast(ti.round(x - offset[0]), ti.i32), 0), width - 1)
                sy = ti.min(ti.max(ti.cast(ti.round(y - offset[1]), ti.i32), 0), height - 1)

                spec = SPECULAR_STRENGTH * ti.pow(ti.max(n.dot(light), 0.0), SPECULAR_SHININESS) * t
                c = self.background[sx, sy] + INSIDE_HIGHLIGHT + spec
                c = ti.min(ti.max(c, 0.0), 1.0)
            self.image[x, y] = c

    def shade(self, compositor, params):
        """
        Shade the compositor's last built extent.

        Args:
            compositor: SDFCompositor with build_fields() already run
            params: ShadingParams of this tick

        Returns:
            image field (width, height) of RGB in [0, 1]
        """
        width = min(compositor.extent[0], self.width)
        height = min(compositor.extent[1], self.height)
        self._shade(compositor.gradient, compositor.occupied,
                    ti.Vector(params.light_direction), ti.Vector(params.gradient_scale),
                    width, height)
        return self.image
