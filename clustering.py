"""
Bubble clustering: partition live bubbles into interaction groups.

Greedy connected components over the contact predicate
    |a.origin - b.origin| <= a.radius + b.radius

Pipeline (per group):
1. Seed the group with the first unassigned bubble
2. Scan the unassigned pool; a candidate joins on the FIRST current member
   it touches (members tested in insertion order)
3. After every join the scan restarts (chains A-B-C end up together)
4. Finalize smooth factor from the closest center distance seen

Output is a Clustering: groups in creation order and a flattened copy of
the bubbles where group g owns bubbles[g.start:g.start + g.count].

Complexity is O(n³) worst case; fine for interactive bubble counts.
Which bubble seeds a group depends on pool order, so grouping of
ambiguous chains is not deterministic across pool orderings.
"""

from bubble import Clustering, Group, CapacityError
from config import (MAX_BUBBLES, MAX_GROUPS, DEFAULT_SMOOTH_FACTOR,
                    SMOOTH_FACTOR_NUMERATOR)


def smooth_factor_for(min_distance):
    """Smooth factor of a multi-member group: NUMERATOR / (1 + minD)."""
    return SMOOTH_FACTOR_NUMERATOR / (1.0 + min_distance)


def _join_first_candidate(members, pool):
    """
    Find the first pool bubble touching any current member.

    Returns:
        (pool index or -1, closest center distance tested during this scan)
    """
    min_d = float("inf")
    for idx, candidate in enumerate(pool):
        for member in members:
            distance = member.center_distance(candidate)
            min_d = min(min_d, distance)
            if distance <= member.radius + candidate.radius:
                return idx, min_d
    return -1, min_d


def cluster_bubbles(bubbles):
    """
    Partition bubbles into groups.

    Args:
        bubbles: Iterable of live Bubble objects (left untouched)

    Returns:
        Clustering(groups, flattened bubble copies)

    Raises:
        CapacityError: more than MAX_BUBBLES bubbles or MAX_GROUPS groups
    """
    pool = [b.copy() for b in bubbles]
    if len(pool) > MAX_BUBBLES:
        raise CapacityError(f"{len(pool)} bubbles exceeds MAX_BUBBLES={MAX_BUBBLES}")

    groups = []
    flat = []

    while pool:
        start = len(flat)
        members = [pool.pop(0)]
        min_d = float("inf")

        while pool:
            idx, scan_min = _join_first_candidate(members, pool)
            min_d = min(min_d, scan_min)
            if idx < 0:
                break
            members.append(pool.pop(idx))

        if len(members) > 1:
            smooth_factor = smooth_factor_for(min_d)
        else:
            smooth_factor = DEFAULT_SMOOTH_FACTOR

        flat.extend(members)
        groups.append(Group(start, len(members), smooth_factor))
        if len(groups) > MAX_GROUPS:
            raise CapacityError(f"{len(groups)} groups exceeds MAX_GROUPS={MAX_GROUPS}")

    return Clustering(groups, flat)
