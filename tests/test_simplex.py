import os
import sys

import numpy as np

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import simplex


def _grid2(x0, z0, step=0.05, n=40):
    arr = np.mgrid[0:n, 0:n].T.reshape((-1, 2)) * step
    return arr + np.array([x0, z0])


def test_same_seed_same_field():
    pts = _grid2(3.0, -7.0)
    a = simplex.SimplexNoise(seed=99).noise(pts)
    b = simplex.SimplexNoise(seed=99).noise(pts)
    assert (a == b).all()


def test_different_seeds_differ():
    pts = _grid2(0.3, 0.7)
    a = simplex.SimplexNoise(seed=1).noise(pts)
    b = simplex.SimplexNoise(seed=2).noise(pts)
    assert not np.allclose(a, b)


def test_values_in_range_and_varied():
    rng = np.random.RandomState(0)
    s = simplex.SimplexNoise(seed=5)
    for dims in (2, 3):
        pts = rng.uniform(-200, 200, size=(5000, dims))
        n = s.noise(pts)
        assert n.shape == (5000,)
        assert n.min() >= -1.0 and n.max() <= 1.0
        assert n.std() > 0.05


def test_continuous_far_from_origin():
    # Neighbouring samples stay close even where the lattice hash wraps.
    s = simplex.SimplexNoise(seed=11)
    for x0 in (0.0, 255.5, 10000.25, -3000.75):
        pts = _grid2(x0, x0, step=0.01, n=60)
        n = s.noise(pts).reshape((60, 60))
        assert np.abs(np.diff(n, axis=0)).max() < 0.2
        assert np.abs(np.diff(n, axis=1)).max() < 0.2


def test_sample_broadcasts():
    s = simplex.SimplexNoise(seed=3)
    xs = np.arange(5)[None, :] * 0.3
    zs = np.arange(4)[:, None] * 0.3
    grid = s.sample(xs, zs)
    assert grid.shape == (4, 5)
    assert np.isclose(grid[2, 3], s.noise([[xs[0, 3], zs[2, 0]]])[0])
    assert s.sample(1.5, 2.5).shape == ()


def test_large_seed_is_truncated():
    pts = _grid2(1.0, 1.0)
    a = simplex.SimplexNoise(seed=2**32 + 17).noise(pts)
    b = simplex.SimplexNoise(seed=17).noise(pts)
    assert (a == b).all()
