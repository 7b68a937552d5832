import math

import numpy as np
import pytest

from podcast_app.utils.scales import Domain, LinearScale, Range, extent, nice_ticks


def test_domain_normalises_reversed_bounds():
    d = Domain(10, 2)
    assert (d.min, d.max) == (2.0, 10.0)
    assert d.width == 8.0
    assert Domain(3, 3).is_degenerate


def test_extent():
    assert extent([3, -1, 7.5]) == Domain(-1, 7.5)
    assert extent([]) == Domain(0, 0)
    assert extent([2.0, float("nan")]) == Domain(2, 2)


def test_affine_mapping_and_inverse():
    s = LinearScale(Domain(0, 10), Range(100, 200))
    assert s(0) == 100
    assert s(10) == 200
    assert s(5) == pytest.approx(150)
    assert s(-5) == pytest.approx(50)  # no clamping outside the domain
    assert s.invert(150) == pytest.approx(5)
    assert s.factor == pytest.approx(10)


def test_inverted_pixel_range():
    s = LinearScale(Domain(0, 1), Range(318, 24))
    assert s(0) == 318
    assert s(1) == 24
    assert s(0.5) == pytest.approx(171)


def test_endpoints_are_exact_for_random_domains():
    rng = np.random.default_rng(0)
    for _ in range(200):
        lo, hi = sorted(rng.uniform(-1e4, 1e4, size=2))
        start, end = rng.uniform(-1000, 1000, size=2)
        s = LinearScale(Domain(lo, hi), Range(start, end))
        assert s(lo) == start
        assert s(hi) == end


def test_degenerate_domain_maps_to_range_midpoint():
    s = LinearScale(Domain(4, 4), Range(60, 616))
    for v in (4, -100, 1e9):
        assert s(v) == 338
    assert s.factor == 0.0


def test_degenerate_range_inverts_to_domain_min():
    s = LinearScale(Domain(2, 8), Range(50, 50))
    assert s.invert(50) == 2
    assert math.isfinite(s(5))


@pytest.mark.parametrize(
    "start, stop, count, expected",
    [
        (0, 1, 5, [0.0, 0.2, 0.4, 0.6, 0.8, 1.0]),
        (0, 10, 10, [float(i) for i in range(11)]),
        (0, 100, 5, [0.0, 20.0, 40.0, 60.0, 80.0, 100.0]),
        (-1, 1, 5, [-1.0, -0.5, 0.0, 0.5, 1.0]),
        (0, 2100, 5, [0.0, 500.0, 1000.0, 1500.0, 2000.0]),
    ],
)
def test_nice_ticks_known_values(start, stop, count, expected):
    assert nice_ticks(start, stop, count) == expected


def test_nice_ticks_edge_cases():
    assert nice_ticks(3, 3, 5) == [3.0]
    assert nice_ticks(0, 1, 0) == []
    assert nice_ticks(0, 1, -2) == []
    assert nice_ticks(10, 0, 5) == nice_ticks(0, 10, 5)


def test_ticks_are_sorted_bounded_and_deterministic():
    rng = np.random.default_rng(11)
    for _ in range(200):
        lo, hi = sorted(rng.uniform(-5000, 5000, size=2))
        count = int(rng.integers(1, 12))
        s = LinearScale(Domain(lo, hi), Range(0, 500))
        ticks = s.ticks(count)
        assert ticks == s.ticks(count)
        assert all(a <= b for a, b in zip(ticks, ticks[1:]))
        assert all(lo <= t <= hi for t in ticks), (lo, hi, ticks)
        assert ticks, f"no ticks for [{lo}, {hi}] count={count}"


def test_tick_steps_are_one_two_or_five_times_power_of_ten():
    ticks = nice_ticks(0.45, 0.95, 5)
    steps = {round(b - a, 12) for a, b in zip(ticks, ticks[1:])}
    assert len(steps) == 1
    step = steps.pop()
    mantissa = step / 10 ** math.floor(math.log10(step))
    assert round(mantissa, 9) in (1.0, 2.0, 5.0)
