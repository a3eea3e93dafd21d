from itertools import permutations
import random

import pytest

from yolotrack.lapjv import solve_dense


def _best_cost(cost):
    n = len(cost)
    return min(sum(cost[i][p[i]] for i in range(n)) for p in permutations(range(n)))


def _assigned_cost(cost, x):
    return sum(cost[row][col] for row, col in enumerate(x))


def test_empty_matrix():
    assert solve_dense([]) == ([], [])


def test_single_element():
    assert solve_dense([[5.0]]) == ([0], [0])


def test_anti_diagonal_preference():
    x, y = solve_dense([[10.0, 1.0], [1.0, 10.0]])
    assert x == [1, 0]
    assert y == [1, 0]


def test_non_square_raises():
    with pytest.raises(ValueError):
        solve_dense([[1.0, 2.0], [3.0]])


@pytest.mark.parametrize("seed", range(12))
def test_random_matrices_are_optimal(seed):
    rng = random.Random(seed)
    n = rng.randint(2, 6)
    cost = [[rng.uniform(0.0, 10.0) for _ in range(n)] for _ in range(n)]
    x, y = solve_dense(cost)
    assert sorted(x) == list(range(n))
    assert all(x[y[j]] == j for j in range(n))
    assert _assigned_cost(cost, x) == pytest.approx(_best_cost(cost))


@pytest.mark.parametrize("seed", range(6))
def test_integer_costs_with_ties(seed):
    rng = random.Random(100 + seed)
    n = rng.randint(3, 6)
    cost = [[float(rng.randint(0, 3)) for _ in range(n)] for _ in range(n)]
    x, y = solve_dense(cost)
    assert sorted(y) == list(range(n))
    assert all(y[x[i]] == i for i in range(n))
    assert _assigned_cost(cost, x) == pytest.approx(_best_cost(cost))


def test_padded_matrix_like_tracker_input():
    # Shape produced when a 2x1 cost is extended with a cost limit.
    limit = 0.4
    cost = [
        [0.1, limit, limit],
        [0.9, limit, limit],
        [limit, 0.0, 0.0],
    ]
    x, _ = solve_dense(cost)
    assert x[0] == 0
    assert x[1] != 0
    assert _assigned_cost(cost, x) == pytest.approx(_best_cost(cost))