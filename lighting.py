"""
Light direction feed and per-tick shading parameters.

The motion sensor runs on its own thread and is the only producer of
LightFeed; the render loop is the only consumer and drains the newest
sample once per tick into an explicit ShadingParams value.
"""

import math
import queue

from config import (GRADIENT_SCALE, LIGHT_DIRECTION_DEFAULT, LIGHT_FEED_MAXSIZE,
                    MOTION_UPDATE_INTERVAL)


def light_angle(roll, yaw, portrait):
    """Sensor attitude → light angle (roll in portrait, yaw otherwise)."""
    return roll if portrait else yaw


def direction_from_angle(angle):
    return (math.cos(angle), math.sin(angle))


class LightFeed:
    """Single-producer channel of light directions."""

    def __init__(self, initial=LIGHT_DIRECTION_DEFAULT):
        self._queue = queue.Queue(maxsize=LIGHT_FEED_MAXSIZE)
        self._current = (float(initial[0]), float(initial[1]))

    def publish(self, roll, yaw, portrait=True):
        """Producer side: push one attitude sample, dropping the oldest when full."""
        direction = direction_from_angle(light_angle(roll, yaw, portrait))
        while True:
            try:
                self._queue.put_nowait(direction)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    # consumer drained it first; retry the put
                    continue

    def drain(self):
        """Consumer side: take every pending sample, keep the newest."""
        while True:
            try:
                self._current = self._queue.get_nowait()
            except queue.Empty:
                return self._current

    @property
    def current(self):
        return self._current


def simulate_sensor(feed, stop, step=0.01, interval=MOTION_UPDATE_INTERVAL,
                    max_samples=None, start_angle=0.0):
    """
    Stand-in for the device motion sensor: publishes a slowly turning
    attitude into feed until stop is set (or max_samples are sent).

    Meant to run as the single producer thread.

    Returns:
        number of samples published
    """
    angle = start_angle
    sent = 0
    while not stop.is_set():
        if max_samples is not None and sent >= max_samples:
            break
        angle += step
        feed.publish(roll=angle, yaw=angle)
        sent += 1
        if interval > 0.0:
            stop.wait(interval)
    return sent


class ShadingParams:
    """Explicit per-tick shading state (replaces ambient globals)."""

    __slots__ = ("light_direction", "gradient_scale")

    def __init__(self, light_direction, gradient_scale):
        self.light_direction = light_direction
        self.gradient_scale = gradient_scale

    @classmethod
    def for_grid(cls, light_direction, width, height):
        """gradient_scale = GRADIENT_SCALE / texture size, per axis."""
        return cls(light_direction, (GRADIENT_SCALE / width, GRADIENT_SCALE / height))

    def __repr__(self):
        return (f"ShadingParams(light=({self.light_direction[0]:.3f}, {self.light_direction[1]:.3f}), "
                f"scale=({self.gradient_scale[0]:.4f}, {self.gradient_scale[1]:.4f}))")
