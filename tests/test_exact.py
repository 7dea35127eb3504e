import pytest

from tsp_lab.graph import FORBIDDEN, WeightedGraph
from tsp_lab.solvers import (
    BruteForceSolver,
    HeldKarpSolver,
    brute_force,
    held_karp,
    is_valid_tour,
    nearest_neighbor_tour,
    tour_length,
    two_opt,
)


def _rotations(tour):
    out = []
    for seq in (tour, tour[::-1]):
        for k in range(len(seq)):
            out.append(seq[k:] + seq[:k])
    return out


@pytest.mark.parametrize("solve", [held_karp, brute_force])
def test_unit_square_perimeter(square, solve):
    tour = solve(square)
    assert tour_length(square, tour) == pytest.approx(4.0)
    assert tour in _rotations([0, 1, 2, 3])


@pytest.mark.parametrize("solve", [held_karp, brute_force, nearest_neighbor_tour])
def test_start_without_edges_is_infeasible(solve):
    def weight(u, v):
        return FORBIDDEN if 0 in (u, v) else 1.0

    assert solve(WeightedGraph.from_function(5, weight)) is None


@pytest.mark.parametrize("solve", [held_karp, brute_force, nearest_neighbor_tour])
def test_isolated_node_is_infeasible(isolated, solve):
    assert solve(isolated) is None


@pytest.mark.parametrize("seed", range(6))
def test_held_karp_matches_brute_force(make_random_graph, seed):
    g = make_random_graph(7, seed=seed, forbid=0.25)
    hk = held_karp(g)
    bf = brute_force(g)
    if bf is None:
        assert hk is None
        return
    assert is_valid_tour(g, hk)
    assert is_valid_tour(g, bf)
    assert tour_length(g, hk) == pytest.approx(tour_length(g, bf))


def test_held_karp_matches_brute_force_on_directed_weights(make_random_graph):
    g = make_random_graph(6, seed=11, symmetric=False)
    assert tour_length(g, held_karp(g)) == pytest.approx(tour_length(g, brute_force(g)))


def test_held_karp_beats_heuristics(make_random_graph):
    g = make_random_graph(9, seed=3)
    best = tour_length(g, held_karp(g))
    nn = nearest_neighbor_tour(g)
    assert best <= tour_length(g, nn) + 1e-9
    assert best <= tour_length(g, two_opt(g, nn, max_passes=10)) + 1e-9


def test_exact_solvers_follow_the_ring(ring):
    tour = held_karp(ring)
    assert tour_length(ring, tour) == pytest.approx(8.0)
    assert tour_length(ring, brute_force(ring)) == pytest.approx(8.0)


def test_held_karp_uses_designated_start():
    g = WeightedGraph.from_points([(0, 0), (1, 0), (1, 1), (0, 1)], start=2)
    tour = held_karp(g)
    assert tour[0] == 2
    assert brute_force(g)[0] == 2


def test_pruned_brute_force_returns_same_tour(make_random_graph):
    for s in range(4):
        g = make_random_graph(7, seed=20 + s, forbid=0.2)
        assert brute_force(g, prune=True) == brute_force(g)


def test_tiny_graphs():
    one = WeightedGraph.from_points([(0, 0)])
    assert held_karp(one) == [0]
    assert brute_force(one) == [0]
    two = WeightedGraph.from_points([(0, 0), (3, 4)])
    assert held_karp(two) == [0, 1]
    assert tour_length(two, brute_force(two)) == pytest.approx(10.0)
    empty = WeightedGraph.from_points([])
    assert held_karp(empty) is None
    assert brute_force(empty) is None


def test_two_node_graph_without_edge():
    g = WeightedGraph.from_points([(0, 0), (1, 0)], edges=[])
    assert held_karp(g) is None
    assert brute_force(g) is None


def test_solver_classes(square):
    assert tour_length(square, HeldKarpSolver().solve(square)) == pytest.approx(4.0)
    assert tour_length(square, BruteForceSolver(prune=True).solve(square)) == pytest.approx(4.0)
