import numpy as np
import pytest

from bubble import Bubble
from clustering import cluster_bubbles
from config import INSIDE_HIGHLIGHT, SPECULAR_STRENGTH
from fields import SDFCompositor
from lighting import ShadingParams
from shading import RefractionShader, make_background


def shade_one_bubble(background, light):
    width, height = background.shape[0], background.shape[1]
    compositor = SDFCompositor(width, height)
    shader = RefractionShader(background)

    compositor.upload(cluster_bubbles([Bubble((32.0, 32.0), 20.0, 0)]))
    compositor.build_fields()
    return shader.shade(compositor, ShadingParams.for_grid(light, width, height)).to_numpy()


def ramp_background(width=64, height=64):
    ramp = (np.arange(width, dtype=np.float32) / 128.0)[:, None, None]
    return np.broadcast_to(ramp, (width, height, 3)).copy()


def test_shading_tints_inside_and_keeps_outside():
    background = np.full((64, 64, 3), 0.5, dtype=np.float32)
    image = shade_one_bubble(background, (1.0, 0.0))

    assert np.all((image >= 0.0) & (image <= 1.0))
    np.testing.assert_allclose(image[2, 2], 0.5)
    # Flat background + zero gradient at the center: only the tint remains
    np.testing.assert_allclose(image[32, 32], 0.5 + INSIDE_HIGHLIGHT, atol=1e-5)


def test_rim_cell_samples_background_against_gradient():
    background = ramp_background()
    # Light perpendicular to the +x gradient: no specular
    image = shade_one_bubble(background, (0.0, 1.0))

    # Cell (49, 32): d = -3, t = 0.925, offset = 30 * t = 27.75 → sample x = 21
    np.testing.assert_allclose(image[49, 32], 21.0 / 128.0 + INSIDE_HIGHLIGHT, atol=1e-5)
    # Outside the bubble the ramp is untouched
    np.testing.assert_allclose(image[60, 32], background[60, 32], atol=1e-6)


def test_specular_follows_light_direction():
    background = ramp_background()
    image = shade_one_bubble(background, (1.0, 0.0))

    t = 1.0 - 3.0 / 40.0
    expected = 21.0 / 128.0 + INSIDE_HIGHLIGHT + SPECULAR_STRENGTH * t
    np.testing.assert_allclose(image[49, 32], expected, atol=1e-4)


def test_procedural_background_shape_and_range():
    img = make_background(40, 20, seed=3)
    assert img.shape == (40, 20, 3)
    assert img.dtype == np.float32
    assert img.min() >= 0.0 and img.max() <= 1.0
