import random

import pytest

from tsp_lab.graph import FORBIDDEN, WeightedGraph


@pytest.fixture
def square():
    """Unit square, all edges present; the optimal tour is the perimeter (4.0)."""
    return WeightedGraph.from_points([(0, 0), (1, 0), (1, 1), (0, 1)])


@pytest.fixture
def ring():
    """Eight nodes on a ring (cost 1) with skip-one chords (cost 2); nothing else exists."""
    n = 8

    def weight(u, v):
        gap = (v - u) % n
        if gap in (1, n - 1):
            return 1.0
        if gap in (2, n - 2):
            return 2.0
        return FORBIDDEN

    return WeightedGraph.from_function(n, weight)


@pytest.fixture
def isolated():
    """Node 3 has no edges at all."""

    def weight(u, v):
        if 3 in (u, v):
            return FORBIDDEN
        return float(abs(u - v))

    return WeightedGraph.from_function(6, weight)


def random_graph(n, seed, forbid=0.0, symmetric=True):
    rng = random.Random(seed)
    table = {}
    for u in range(n):
        for v in range(n):
            if u == v or (symmetric and (v, u) in table):
                continue
            table[(u, v)] = FORBIDDEN if rng.random() < forbid else round(rng.uniform(1, 20), 3)
    if symmetric:
        table.update({(v, u): w for (u, v), w in list(table.items())})
    return WeightedGraph.from_function(n, lambda u, v: table[(u, v)])


@pytest.fixture
def make_random_graph():
    return random_graph
