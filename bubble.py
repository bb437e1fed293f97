"""
Value types shared by the clustering engine, field compositor and session.

- Bubble:     circle in field space, evaluable as a signed distance function
- Group:      contiguous run [start, start + count) of the flattened bubble list
- Clustering: ordered groups + flattened, group-ordered bubble snapshot
- Selection:  drag/pinch target, referenced by bubble id (never by object)

Errors:
- CapacityError:  bubble/group count beyond MAX_BUBBLES / MAX_GROUPS
- OutOfGridError: field query or extent outside the evaluation grid
"""

import math
from collections import namedtuple


class CapacityError(RuntimeError):
    """Bubble or group count exceeds the fixed device buffer size."""


class OutOfGridError(IndexError):
    """A field query falls outside the evaluation grid."""


class Bubble:
    """
    Circle in field space.

    Distance contract: distance(p) = |p - origin| - radius,
    negative inside, zero on the boundary.
    """

    __slots__ = ("origin", "radius", "id")

    def __init__(self, origin, radius, bubble_id):
        self.origin = (float(origin[0]), float(origin[1]))
        self.radius = float(radius)
        self.id = int(bubble_id)

    def distance(self, p):
        return math.hypot(p[0] - self.origin[0], p[1] - self.origin[1]) - self.radius

    def center_distance(self, other):
        return math.hypot(self.origin[0] - other.origin[0], self.origin[1] - other.origin[1])

    def touches(self, other):
        """Contact predicate used for clustering (tangent circles touch)."""
        return self.center_distance(other) <= self.radius + other.radius

    def copy(self):
        return Bubble(self.origin, self.radius, self.id)

    def __repr__(self):
        return f"Bubble(id={self.id}, origin=({self.origin[0]:.2f}, {self.origin[1]:.2f}), r={self.radius:.2f})"


class Group:
    """
    Interaction group: members are bubbles[start:start + count] of the
    flattened sequence that comes with it.
    """

    __slots__ = ("start", "count", "smooth_factor")

    def __init__(self, start, count, smooth_factor):
        self.start = start
        self.count = count
        self.smooth_factor = smooth_factor

    @property
    def members(self):
        return slice(self.start, self.start + self.count)

    def __repr__(self):
        return f"Group(start={self.start}, count={self.count}, k={self.smooth_factor:.3f})"


# groups: list[Group], bubbles: list[Bubble] (copies, group-ordered)
Clustering = namedtuple("Clustering", ["groups", "bubbles"])


class Selection:
    """Active drag/pinch target captured at gesture begin."""

    __slots__ = ("bubble_id", "initial_origin", "initial_radius", "initial_hit")

    def __init__(self, bubble, initial_hit):
        self.bubble_id = bubble.id
        self.initial_origin = bubble.origin
        self.initial_radius = bubble.radius
        self.initial_hit = (float(initial_hit[0]), float(initial_hit[1]))

    def __repr__(self):
        return f"Selection(bubble_id={self.bubble_id}, hit=({self.initial_hit[0]:.2f}, {self.initial_hit[1]:.2f}))"
