import itertools
import random

import pytest

from bubble import Bubble, CapacityError
from clustering import cluster_bubbles, smooth_factor_for
from config import DEFAULT_SMOOTH_FACTOR, MAX_BUBBLES


def make_bubbles(specs):
    return [Bubble(origin, radius, i) for i, (origin, radius) in enumerate(specs)]


def random_bubbles(seed, n):
    rng = random.Random(seed)
    return make_bubbles([((rng.uniform(0, 400), rng.uniform(0, 400)), rng.uniform(5, 40))
                         for _ in range(n)])


@pytest.mark.parametrize("seed", range(8))
def test_partition_invariant(seed):
    bubbles = random_bubbles(seed, 40)
    groups, flat = cluster_bubbles(bubbles)

    assert sum(g.count for g in groups) == len(bubbles)
    assert sorted(b.id for b in flat) == sorted(b.id for b in bubbles)

    offset = 0
    for g in groups:
        assert g.count >= 1
        assert g.start == offset
        offset += g.count


@pytest.mark.parametrize("seed", range(8))
def test_groups_are_maximal(seed):
    groups, flat = cluster_bubbles(random_bubbles(seed, 40))
    for g1, g2 in itertools.combinations(groups, 2):
        for a in flat[g1.members]:
            for b in flat[g2.members]:
                assert not a.touches(b)


def test_touching_chain_forms_one_group_in_any_order():
    # A touches B, B touches C, A does not touch C
    specs = [((0.0, 0.0), 10.0), ((15.0, 0.0), 10.0), ((30.0, 0.0), 10.0)]
    for order in itertools.permutations(specs):
        groups, flat = cluster_bubbles(make_bubbles(order))
        assert len(groups) == 1
        assert groups[0].count == 3


def test_isolated_bubbles_are_singletons_with_default_smooth_factor():
    bubbles = make_bubbles([((0.0, 0.0), 10.0), ((100.0, 0.0), 10.0), ((0.0, 100.0), 10.0)])
    groups, flat = cluster_bubbles(bubbles)

    assert len(groups) == 3
    for g in groups:
        assert g.count == 1
        assert g.smooth_factor == DEFAULT_SMOOTH_FACTOR


def test_tangent_bubbles_touch():
    groups, _ = cluster_bubbles(make_bubbles([((0.0, 0.0), 10.0), ((20.0, 0.0), 10.0)]))
    assert [g.count for g in groups] == [2]


def test_pair_smooth_factor_from_center_distance():
    bubbles = make_bubbles([((0.0, 0.0), 50.0), ((60.0, 0.0), 50.0)])
    groups, flat = cluster_bubbles(bubbles)

    assert len(groups) == 1
    assert groups[0].count == 2
    assert groups[0].smooth_factor == pytest.approx(3000.0 / 61.0)
    assert smooth_factor_for(60.0) == pytest.approx(3000.0 / 61.0)


def test_empty_input():
    groups, flat = cluster_bubbles([])
    assert groups == []
    assert flat == []


def test_flattened_bubbles_are_a_snapshot():
    bubbles = make_bubbles([((0.0, 0.0), 10.0)])
    _, flat = cluster_bubbles(bubbles)

    bubbles[0].origin = (500.0, 500.0)
    bubbles[0].radius = 1.0
    assert flat[0].origin == (0.0, 0.0)
    assert flat[0].radius == 10.0


def test_too_many_bubbles_is_rejected():
    bubbles = make_bubbles([((i * 100.0, 0.0), 1.0) for i in range(MAX_BUBBLES + 1)])
    with pytest.raises(CapacityError):
        cluster_bubbles(bubbles)
