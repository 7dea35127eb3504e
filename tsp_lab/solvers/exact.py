import itertools
import math
from typing import List, Optional

from ..graph import WeightedGraph
from .base import Solver, Tour, tour_length, trivial_tour


# Sizes above these still run, but callers should warn first.
HELD_KARP_PRACTICAL_LIMIT = 20
BRUTE_FORCE_PRACTICAL_LIMIT = 11


def held_karp(graph: WeightedGraph) -> Optional[Tour]:
    """
    Subset dynamic program over the nodes other than the start.

    ``dp[mask][k]`` is the cheapest path that leaves the start, visits exactly
    the nodes in ``mask`` and ends at ``rest[k]``. O(N^2 * 2^N) time.
    """
    n = graph.n
    if n < 2:
        return trivial_tour(graph)
    start = graph.start_or_default()
    rest = [v for v in range(n) if v != start]
    m = len(rest)
    cost = graph.cost_table()
    full = (1 << m) - 1

    dp: List[List[float]] = [[math.inf] * m for _ in range(1 << m)]
    parent: List[List[int]] = [[-1] * m for _ in range(1 << m)]
    for k, v in enumerate(rest):
        w = cost[start][v]
        if w is not None:
            dp[1 << k][k] = w

    for mask in range(1, full + 1):
        row = dp[mask]
        for j in range(m):
            jbit = 1 << j
            if not mask & jbit:
                continue
            prev_mask = mask ^ jbit
            if prev_mask == 0:
                continue
            prev_row = dp[prev_mask]
            vj = rest[j]
            for k in range(m):
                if not prev_mask & (1 << k) or prev_row[k] == math.inf:
                    continue
                w = cost[rest[k]][vj]
                if w is None:
                    continue
                cand = prev_row[k] + w
                if cand < row[j]:
                    row[j] = cand
                    parent[mask][j] = k

    best, last = math.inf, -1
    for j in range(m):
        w = cost[rest[j]][start]
        if w is None or dp[full][j] == math.inf:
            continue
        cand = dp[full][j] + w
        if cand < best:
            best, last = cand, j
    if last == -1:
        return None

    path = []
    mask, cur = full, last
    while cur != -1:
        path.append(rest[cur])
        prev = parent[mask][cur]
        mask ^= 1 << cur
        cur = prev
    path.reverse()
    return [start] + path


def brute_force(graph: WeightedGraph, prune: bool = False) -> Optional[Tour]:
    """
    Exhaustive search over every ordering of the non-start nodes.

    With ``prune`` a partial ordering is abandoned as soon as its open-path
    cost reaches the best complete tour; the returned tour is the same.
    """
    n = graph.n
    if n < 2:
        return trivial_tour(graph)
    start = graph.start_or_default()
    rest = [v for v in range(n) if v != start]
    if prune:
        return _brute_force_pruned(graph, start, rest)

    best_tour, best_len = None, math.inf
    for perm in itertools.permutations(rest):
        cand = [start, *perm]
        length = tour_length(graph, cand)
        if length < best_len:
            best_tour, best_len = cand, length
    return best_tour


def _brute_force_pruned(graph: WeightedGraph, start: int, rest: List[int]) -> Optional[Tour]:
    cost = graph.cost_table()
    best = {"tour": None, "length": math.inf}
    prefix = [start]
    used = [False] * graph.n
    used[start] = True

    def extend(prefix_cost: float) -> None:
        if prefix_cost >= best["length"]:
            return
        if len(prefix) == graph.n:
            length = tour_length(graph, prefix)
            if length < best["length"]:
                best["tour"], best["length"] = list(prefix), length
            return
        last = prefix[-1]
        for v in rest:
            if used[v]:
                continue
            w = cost[last][v]
            if w is None:
                continue
            used[v] = True
            prefix.append(v)
            extend(prefix_cost + w)
            prefix.pop()
            used[v] = False

    extend(0.0)
    return best["tour"]


class HeldKarpSolver(Solver):
    name = "held_karp"

    def solve(self, graph: WeightedGraph) -> Optional[Tour]:
        return held_karp(graph)


class BruteForceSolver(Solver):
    name = "brute_force"

    def __init__(self, prune: bool = False):
        self.prune = prune

    def solve(self, graph: WeightedGraph) -> Optional[Tour]:
        return brute_force(graph, prune=self.prune)
