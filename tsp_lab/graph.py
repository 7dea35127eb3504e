import math
import numbers
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence, Tuple, Union

import networkx as nx


@dataclass(frozen=True)
class Cost:
    value: float


class Forbidden:
    """Marker for a node pair with no direct connection."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "FORBIDDEN"

    def __reduce__(self):
        return (Forbidden, ())


FORBIDDEN = Forbidden()

Weight = Union[Cost, Forbidden]
WeightFunction = Callable[[int, int], Union[Weight, float, int]]


def _coerce_weight(raw, u: int, v: int) -> Weight:
    if raw is FORBIDDEN or isinstance(raw, Cost):
        weight = raw
    elif isinstance(raw, numbers.Real) and not isinstance(raw, bool):
        weight = Cost(float(raw))
    else:
        raise ValueError(f"weight({u}, {v}) returned {raw!r}; expected a number, Cost or FORBIDDEN")
    if isinstance(weight, Cost) and (not math.isfinite(weight.value) or weight.value < 0):
        raise ValueError(
            f"weight({u}, {v}) = {weight.value!r}; costs must be finite and non-negative "
            "(use FORBIDDEN for missing edges)"
        )
    return weight


class WeightedGraph:
    """
    Node set ``0..N-1`` plus a weight function backed by a networkx graph.

    A pair without an edge is FORBIDDEN. Passing a ``DiGraph`` makes the weight
    direction-dependent; an undirected ``Graph`` is symmetric. All checks happen
    here, once, so solvers can trust the graph.
    """

    def __init__(self, graph: nx.Graph, start: Optional[int] = 0):
        n = graph.number_of_nodes()
        if set(graph.nodes()) != set(range(n)):
            raise ValueError("graph nodes must be exactly the integers 0..N-1")
        if start is not None and (not isinstance(start, numbers.Integral) or isinstance(start, bool)):
            raise ValueError(f"start node must be an integer or None, got {start!r}")
        if start is not None and not 0 <= start < max(n, 1):
            raise ValueError(f"start node {start} is outside 0..{n - 1}")
        for u, v, w in graph.edges(data="weight"):
            if u == v:
                continue
            if w is None:
                raise ValueError(f"edge ({u}, {v}) has no 'weight' attribute")
            _coerce_weight(w, u, v)
        self.graph = graph
        self.start = start if n else None

    @classmethod
    def from_function(cls, n: int, weight: WeightFunction, start: Optional[int] = 0) -> "WeightedGraph":
        """Tabulate ``weight`` over every ordered pair of distinct nodes."""
        if n < 0:
            raise ValueError(f"node count must be non-negative, got {n}")
        graph = nx.DiGraph()
        graph.add_nodes_from(range(n))
        for u in range(n):
            for v in range(n):
                if u == v:
                    continue
                w = _coerce_weight(weight(u, v), u, v)
                if isinstance(w, Cost):
                    graph.add_edge(u, v, weight=w.value)
        return cls(graph, start=start)

    @classmethod
    def from_points(
        cls,
        points: Sequence[Tuple[float, float]],
        edges: Optional[Iterable[Tuple[int, int]]] = None,
        start: Optional[int] = 0,
    ) -> "WeightedGraph":
        """Euclidean costs; complete unless ``edges`` restricts the pairs."""
        n = len(points)
        graph = nx.Graph()
        graph.add_nodes_from(range(n))
        if edges is None:
            pairs = ((u, v) for u in range(n) for v in range(u + 1, n))
        else:
            pairs = list(edges)
            for u, v in pairs:
                if not (0 <= u < n and 0 <= v < n):
                    raise ValueError(f"edge ({u}, {v}) references a node outside 0..{n - 1}")
        for u, v in pairs:
            if u == v:
                continue
            (x1, y1), (x2, y2) = points[u], points[v]
            graph.add_edge(u, v, weight=math.hypot(x1 - x2, y1 - y2))
        return cls(graph, start=start)

    @property
    def n(self) -> int:
        return self.graph.number_of_nodes()

    def __len__(self) -> int:
        return self.n

    @property
    def nodes(self) -> range:
        return range(self.n)

    def weight(self, u: int, v: int) -> Weight:
        data = self.graph.get_edge_data(u, v)
        if data is None:
            return FORBIDDEN
        return Cost(float(data["weight"]))

    def cost(self, u: int, v: int) -> Optional[float]:
        """Numeric cost of ``(u, v)``, or None when the edge is forbidden."""
        data = self.graph.get_edge_data(u, v)
        if data is None:
            return None
        return float(data["weight"])

    def cost_table(self):
        """``table[u][v]`` is the cost of ``(u, v)`` or None; the diagonal is None."""
        n = self.n
        table = [[None] * n for _ in range(n)]
        for u in range(n):
            for v in range(n):
                if u != v:
                    table[u][v] = self.cost(u, v)
        return table

    def start_or_default(self) -> int:
        return self.start if self.start is not None else 0

    def __repr__(self) -> str:
        return f"WeightedGraph(n={self.n}, edges={self.graph.number_of_edges()}, start={self.start})"
