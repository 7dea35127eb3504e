import math
from typing import Optional, Sequence

from ..graph import FORBIDDEN, WeightedGraph
from .base import Solver, Tour, is_valid_tour, tour_length, trivial_tour


IMPROVEMENT_TOLERANCE = 1e-9


def nearest_neighbor_tour(graph: WeightedGraph, start: Optional[int] = None) -> Optional[Tour]:
    n = graph.n
    if n < 2:
        return trivial_tour(graph)
    if start is None:
        start = graph.start_or_default()
    tour = [start]
    seen = [False] * n
    seen[start] = True
    current = start
    for _ in range(n - 1):
        best, best_w = -1, math.inf
        for node in range(n):
            if seen[node]:
                continue
            w = graph.cost(current, node)
            if w is not None and w < best_w:
                best, best_w = node, w
        if best == -1:
            return None
        tour.append(best)
        seen[best] = True
        current = best
    if graph.weight(tour[-1], tour[0]) is FORBIDDEN:
        return None
    return tour


def two_opt(graph: WeightedGraph, tour: Optional[Sequence[int]], max_passes: int = 4) -> Optional[Tour]:
    """
    First-improvement 2-opt over the open path ``tour[0] .. tour[-1]``.

    Each accepted move replaces ``(a, b), (c, d)`` by ``(a, c), (b, d)`` by
    reversing ``tour[i+1 .. j]``. The closing edge is never exchanged.
    """
    if tour is None:
        return None
    n = len(tour)
    if n != graph.n:
        raise ValueError(f"2-opt needs a complete seed tour ({graph.n} nodes), got {n}")
    best = list(tour)
    passes = 0
    improved = True
    while improved and passes < max_passes:
        improved = False
        passes += 1
        for i in range(n - 3):
            for j in range(i + 2, n - 1):
                a, b, c, d = best[i], best[i + 1], best[j], best[j + 1]
                ac, bd = graph.cost(a, c), graph.cost(b, d)
                if ac is None or bd is None:
                    continue
                ab, cd = graph.cost(a, b), graph.cost(c, d)
                if ab is None or cd is None:
                    continue
                delta = (ac + bd) - (ab + cd)
                if delta < -IMPROVEMENT_TOLERANCE:
                    best[i + 1 : j + 1] = reversed(best[i + 1 : j + 1])
                    improved = True
    if not math.isfinite(tour_length(graph, best)):
        return None
    return best


class NearestNeighborSolver(Solver):
    name = "nearest_neighbor"

    def __init__(self, start: Optional[int] = None):
        self.start = start

    def solve(self, graph: WeightedGraph) -> Optional[Tour]:
        return nearest_neighbor_tour(graph, self.start)


class TwoOptSolver(Solver):
    """
    2-opt on top of a seed tour.

    The seed is ``seed_tour`` when it is a usable complete tour, otherwise the
    nearest-neighbor tour. Returns None when neither exists.
    """

    name = "two_opt"

    def __init__(self, seed_tour: Optional[Sequence[int]] = None, max_passes: int = 6):
        self.seed_tour = list(seed_tour) if seed_tour is not None else None
        self.max_passes = max_passes

    def seed(self, graph: WeightedGraph) -> Optional[Tour]:
        if is_valid_tour(graph, self.seed_tour):
            return list(self.seed_tour)
        return nearest_neighbor_tour(graph)

    def solve(self, graph: WeightedGraph) -> Optional[Tour]:
        if graph.n < 2:
            return trivial_tour(graph)
        return two_opt(graph, self.seed(graph), max_passes=self.max_passes)
