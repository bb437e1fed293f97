"""
Gesture routing: host-side translation of pointer gestures into edits.

The core engine only accepts field-space coordinates; ViewMapping does the
view → field conversion (aspect-fit, centered) before anything reaches the
BubbleSet or the compositor.

Gestures:
- pan:        began → pick & select (miss clears), changed → move,
              ended/cancelled → clear
- pinch:      began → pick & select (miss clears), changed → rescale by the
              cumulative pinch scale, ended/cancelled → clear
- double tap: pick → remove the hit bubble, or add a DEFAULT_BUBBLE_RADIUS
              bubble at the point
- tap:        probe the current field at the point
"""

from bubble import CapacityError, OutOfGridError
from config import DEFAULT_BUBBLE_RADIUS

PHASE_BEGAN = "began"
PHASE_CHANGED = "changed"
PHASE_ENDED = "ended"
PHASE_CANCELLED = "cancelled"


class ViewMapping:
    """
    Aspect-fit of content (the evaluation grid) inside a view.

    scale  = min(view_w / content_w, view_h / content_h)
    offset = (view - content * scale) / 2
    field  = (view_point - offset) / scale
    """

    def __init__(self, view_size, content_size):
        self.view_size = (float(view_size[0]), float(view_size[1]))
        self.content_size = (float(content_size[0]), float(content_size[1]))

        self.scale = min(self.view_size[0] / self.content_size[0],
                         self.view_size[1] / self.content_size[1])
        shown_w = self.content_size[0] * self.scale
        shown_h = shown_w * (self.content_size[1] / self.content_size[0])
        self.offset = ((self.view_size[0] - shown_w) * 0.5,
                       (self.view_size[1] - shown_h) * 0.5)

    def to_field(self, view_point):
        return ((view_point[0] - self.offset[0]) / self.scale,
                (view_point[1] - self.offset[1]) / self.scale)


class GestureRouter:
    """
    Routes gesture events to a BubbleSet (edits) and an SDFCompositor
    (tap probes). Cancelled is handled exactly like ended.
    """

    def __init__(self, bubbles, compositor, mapping):
        self.bubbles = bubbles
        self.compositor = compositor
        self.mapping = mapping

    def _select_at(self, point):
        bubble = self.bubbles.pick(point)
        if bubble is not None:
            self.bubbles.begin_selection(bubble, point)
        else:
            self.bubbles.clear_selection()
        return bubble

    def on_pan(self, phase, view_point):
        point = self.mapping.to_field(view_point)
        if phase == PHASE_BEGAN:
            self._select_at(point)
        elif phase == PHASE_CHANGED:
            self.bubbles.move_selection(point)
        elif phase in (PHASE_ENDED, PHASE_CANCELLED):
            self.bubbles.clear_selection()

    def on_pinch(self, phase, view_point, scale=1.0):
        point = self.mapping.to_field(view_point)
        if phase == PHASE_BEGAN:
            self._select_at(point)
        elif phase == PHASE_CHANGED:
            self.bubbles.rescale_selection(scale)
        elif phase in (PHASE_ENDED, PHASE_CANCELLED):
            self.bubbles.clear_selection()

    def on_double_tap(self, view_point):
        """Remove the bubble under the point, or add one there."""
        point = self.mapping.to_field(view_point)
        bubble = self.bubbles.pick(point)
        if bubble is not None:
            self.bubbles.remove(bubble)
            return None
        try:
            return self.bubbles.add(point, DEFAULT_BUBBLE_RADIUS)
        except CapacityError as e:
            print(f"[Gesture][WARN] Add rejected: {e}")
            return None

    def on_tap(self, view_point):
        """Probe the last uploaded field at the point. Returns the distance or None."""
        point = self.mapping.to_field(view_point)
        try:
            value, inside = self.compositor.evaluate(point)
        except OutOfGridError as e:
            print(f"[Tap][WARN] {e}")
            return None
        print(f"[Tap] value [{value:1.2f}] inside={inside}")
        return value
