"""
Bubble Set Manager: the mutable session state.

Owns:
- the live bubble collection (insertion order)
- the id counter (monotonic, ids never reused within a session)
- at most one Selection (drag/pinch target), referenced by bubble id

States:
    idle ──begin_selection──▶ selected ──clear_selection──▶ idle

Edits are single-threaded (one gesture stream). update() re-clusters the
whole collection every tick and returns a snapshot; edits made afterwards
only show up in the next tick's snapshot.
"""

from bubble import Bubble, Selection, CapacityError
from clustering import cluster_bubbles
from config import MAX_BUBBLES


class BubbleSet:
    """Live bubbles plus the optional selection."""

    def __init__(self):
        self._bubbles = []
        self._next_id = 0
        self._selection = None

    def __len__(self):
        return len(self._bubbles)

    def __iter__(self):
        return iter(self._bubbles)

    @property
    def selection(self):
        return self._selection

    @property
    def state(self):
        return "selected" if self._selection is not None else "idle"

    # ==========================================================================
    # Edits
    # ==========================================================================

    def add(self, origin, radius):
        """
        Create a bubble with the next sequential id.

        Raises:
            CapacityError: MAX_BUBBLES bubbles already live
        """
        if len(self._bubbles) >= MAX_BUBBLES:
            raise CapacityError(f"cannot add bubble: MAX_BUBBLES={MAX_BUBBLES} reached")
        bubble = Bubble(origin, radius, self._next_id)
        self._next_id += 1
        self._bubbles.append(bubble)
        return bubble

    def remove(self, bubble):
        """Remove by identity (id). Returns False when not found."""
        for i, b in enumerate(self._bubbles):
            if b.id == bubble.id:
                del self._bubbles[i]
                return True
        return False

    def get(self, bubble_id):
        for b in self._bubbles:
            if b.id == bubble_id:
                return b
        return None

    def pick(self, point):
        """First live bubble containing point (distance <= 0), else None."""
        for b in self._bubbles:
            if b.distance(point) <= 0.0:
                return b
        return None

    # ==========================================================================
    # Selection
    # ==========================================================================

    def begin_selection(self, bubble, hit):
        """Select bubble, capturing its origin/radius and the hit point."""
        self._selection = Selection(bubble, hit)

    def clear_selection(self):
        self._selection = None

    def _selected_bubble(self):
        if self._selection is None:
            return None
        return self.get(self._selection.bubble_id)

    def move_selection(self, point):
        """origin = initial_origin + (point - initial_hit)."""
        bubble = self._selected_bubble()
        if bubble is None:
            return
        sel = self._selection
        bubble.origin = (sel.initial_origin[0] + (point[0] - sel.initial_hit[0]),
                         sel.initial_origin[1] + (point[1] - sel.initial_hit[1]))

    def rescale_selection(self, scale):
        """radius = initial_radius * scale (not cumulative)."""
        bubble = self._selected_bubble()
        if bubble is None:
            return
        bubble.radius = self._selection.initial_radius * float(scale)

    # ==========================================================================
    # Per-tick
    # ==========================================================================

    def update(self):
        """Re-cluster all live bubbles. Returns Clustering(groups, bubbles)."""
        return cluster_bubbles(self._bubbles)
