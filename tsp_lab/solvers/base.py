import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ..graph import FORBIDDEN, WeightedGraph


Tour = List[int]


def tour_length(graph: WeightedGraph, tour: Optional[Sequence[int]]) -> float:
    if not tour or len(tour) < 2:
        return 0.0
    dist = 0.0
    for i in range(len(tour) - 1):
        w = graph.weight(tour[i], tour[i + 1])
        if w is FORBIDDEN:
            return math.inf
        dist += w.value
    if len(tour) == graph.n:
        w = graph.weight(tour[-1], tour[0])
        if w is FORBIDDEN:
            return math.inf
        dist += w.value
    return float(dist)


def is_complete(graph: WeightedGraph, tour: Optional[Sequence[int]]) -> bool:
    return tour is not None and len(tour) == graph.n


def is_valid_tour(graph: WeightedGraph, tour: Optional[Sequence[int]]) -> bool:
    """A complete permutation of the nodes whose closed length is finite."""
    if not is_complete(graph, tour):
        return False
    if sorted(tour) != list(graph.nodes):
        return False
    return math.isfinite(tour_length(graph, tour))


def trivial_tour(graph: WeightedGraph) -> Optional[Tour]:
    """The answer for graphs too small to need a search (N < 2)."""
    if graph.n == 0:
        return None
    return [graph.start_or_default()]


class Solver(ABC):
    name: str = "base"

    @abstractmethod
    def solve(self, graph: WeightedGraph) -> Optional[Tour]:
        raise NotImplementedError


@dataclass
class SolveResult:
    tour: Optional[Tour]
    length: float
    solver_name: str
    runtime: float = 0.0
    optimum: Optional[float] = None

    @property
    def feasible(self) -> bool:
        return self.tour is not None and math.isfinite(self.length)

    @property
    def gap(self) -> float:
        if self.optimum is None or math.isclose(self.optimum, 0.0) or not self.feasible:
            return float("inf")
        return (self.length - self.optimum) / self.optimum


TOUR_OK = "ok"
TOUR_INCOMPLETE = "incomplete"
TOUR_CLOSING_FORBIDDEN = "closing_forbidden"
TOUR_BROKEN = "broken"


def check_user_tour(graph: WeightedGraph, tour: Sequence[int]) -> str:
    """Classify a hand-built tour before it is closed into a cycle."""
    if len(set(tour)) != len(tour) or any(not 0 <= v < graph.n for v in tour):
        return TOUR_BROKEN
    if len(tour) != graph.n:
        return TOUR_INCOMPLETE
    for i in range(len(tour) - 1):
        if graph.weight(tour[i], tour[i + 1]) is FORBIDDEN:
            return TOUR_BROKEN
    if graph.n > 1 and graph.weight(tour[-1], tour[0]) is FORBIDDEN:
        return TOUR_CLOSING_FORBIDDEN
    return TOUR_OK
