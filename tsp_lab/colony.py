import random
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .graph import WeightedGraph
from .solvers.base import Tour, tour_length
from .stepper import Stepper


PHEROMONE_FLOOR = 1e-12
# Stand-in for zero-cost edges when computing the 1/w heuristic.
MIN_HEURISTIC_COST = 1e-12


@dataclass
class AntColonyConfig:
    alpha: float = 1.0
    beta: float = 3.0
    rho: float = 0.5
    ants: int = 30
    iterations: int = 50
    candidate_k: int = 6
    random_seed: Optional[int] = None

    def __post_init__(self):
        if self.ants < 1:
            raise ValueError("ants must be at least 1")
        if self.iterations < 0:
            raise ValueError("iterations must be non-negative")
        if self.candidate_k < 1:
            raise ValueError("candidate_k must be at least 1")
        if not 0.0 <= self.rho <= 1.0:
            raise ValueError("rho must lie in [0, 1]")


class AntColonyStepper(Stepper):
    """
    Ant System with candidate lists, one colony iteration per ``step()``.

    Ants start at the graph's start node (a random node when it has none),
    move with probability proportional to ``tau^alpha * (1/w)^beta`` and
    deposit ``1/L`` on both directions of every edge of their tour.
    """

    name = "ant_colony"

    def __init__(self, graph: WeightedGraph, config: Optional[AntColonyConfig] = None, rng: random.Random = None):
        self.cfg = config or AntColonyConfig()
        super().__init__(self.cfg.iterations)
        self.graph = graph
        self.rng = rng or random.Random(self.cfg.random_seed)
        n = graph.n
        self.n = n

        self.dist = np.zeros((n, n))
        self.allowed = np.zeros((n, n), dtype=bool)
        for u, row in enumerate(graph.cost_table()):
            for v, w in enumerate(row):
                if w is not None:
                    self.dist[u, v] = w
                    self.allowed[u, v] = True
        self.eta = np.zeros((n, n))
        self.eta[self.allowed] = 1.0 / np.maximum(self.dist[self.allowed], MIN_HEURISTIC_COST)

        self.candidates: List[np.ndarray] = []
        for u in range(n):
            reachable = np.flatnonzero(self.allowed[u])
            order = np.argsort(self.dist[u, reachable], kind="stable")
            self.candidates.append(reachable[order[: self.cfg.candidate_k]])

        mean = float(self.dist[self.allowed].mean()) if self.allowed.any() else 0.0
        tau0 = 1.0 / (n * mean) if mean > 0 else 1.0
        self.pheromone = np.full((n, n), tau0)
        if n == 0:
            self.exhausted = True

    def advance(self) -> None:
        weights = np.power(self.pheromone, self.cfg.alpha) * np.power(self.eta, self.cfg.beta)
        weights[~self.allowed] = 0.0

        tours = []
        for _ in range(self.cfg.ants):
            start = self.graph.start if self.graph.start is not None else self.rng.randrange(self.n)
            tour = self.construct(start, weights)
            if tour is None:
                continue
            length = tour_length(self.graph, tour)
            if np.isfinite(length):
                tours.append((tour, length))
                self.offer(tour, length)

        self.pheromone *= 1.0 - self.cfg.rho
        np.maximum(self.pheromone, PHEROMONE_FLOOR, out=self.pheromone)
        for tour, length in tours:
            self.deposit(tour, 1.0 / length if length > 0 else 1.0)

    def construct(self, start: int, weights: np.ndarray) -> Optional[Tour]:
        visited = np.zeros(self.n, dtype=bool)
        visited[start] = True
        tour = [start]
        current = start
        for _ in range(self.n - 1):
            nxt = self.pick(current, visited, weights)
            if nxt == -1:
                return None
            tour.append(nxt)
            visited[nxt] = True
            current = nxt
        if self.n > 1 and not self.allowed[tour[-1], tour[0]]:
            return None
        return tour

    def pick(self, u: int, visited: np.ndarray, weights: np.ndarray) -> int:
        cand = self.candidates[u]
        cand = cand[~visited[cand]]
        probs = weights[u, cand]
        keep = probs > 0
        cand, probs = cand[keep], probs[keep]
        if cand.size == 0:
            # Every shortlisted neighbour is used up; widen to all reachable nodes.
            cand = np.flatnonzero(~visited & (weights[u] > 0))
            if cand.size == 0:
                return -1
            probs = weights[u, cand]
        cumulative = np.cumsum(probs)
        r = self.rng.random() * cumulative[-1]
        idx = int(np.searchsorted(cumulative, r, side="left"))
        return int(cand[min(idx, cand.size - 1)])

    def deposit(self, tour: Tour, amount: float) -> None:
        for i in range(len(tour)):
            u, v = tour[i], tour[(i + 1) % len(tour)]
            if self.allowed[u, v]:
                self.pheromone[u, v] += amount
                self.pheromone[v, u] += amount
