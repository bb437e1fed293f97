import pytest

from sdf import hard_union, smooth_union


def test_hard_union_is_min():
    assert hard_union(3.0, -2.0) == -2.0
    assert hard_union(-1.0, 4.0) == -1.0


def test_smooth_union_prescales_k_by_four():
    # k' = 4, h = 4 - |1 - 2| = 3, 1 - 9 * 0.25 / 4 = 0.4375
    assert smooth_union(1.0, 2.0, 1.0) == pytest.approx(0.4375)


def test_smooth_union_degenerates_to_min_when_far_apart():
    assert smooth_union(0.0, 10.0, 1.0) == pytest.approx(0.0)
    assert smooth_union(-7.0, 5.0, 2.0) == pytest.approx(-7.0)


@pytest.mark.parametrize("d1,d2,k", [
    (-5.0, -5.0, 48.0),
    (3.0, 12.0, 10.0),
    (-20.0, 40.0, 0.5),
    (0.0, 0.0, 3000.0),
])
def test_smooth_union_never_above_hard_union(d1, d2, k):
    assert smooth_union(d1, d2, k) <= hard_union(d1, d2)


@pytest.mark.parametrize("k", [0.0, -1.0])
def test_smooth_union_rejects_non_positive_k(k):
    with pytest.raises(AssertionError):
        smooth_union(1.0, 2.0, k)
