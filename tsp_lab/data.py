import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

import networkx as nx
import numpy as np
import tsplib95

from .graph import WeightedGraph


logger = logging.getLogger(__name__)

DEFAULT_LAYOUT_SEED = 123
LAYOUT_WIDTH = 800.0
LAYOUT_HEIGHT = 600.0
LAYOUT_MARGIN = 36.0


@dataclass
class Instance:
    name: str
    path: Path
    graph: WeightedGraph
    optimum: Optional[float] = None
    points: List[Tuple[float, float]] = field(default_factory=list)
    labels: List[str] = field(default_factory=list)


def letter_label(k: int) -> str:
    if k < 26:
        return chr(ord("A") + k)
    return chr(ord("A") + k // 26 - 1) + chr(ord("A") + k % 26)


def make_labels(n: int, labels: Optional[List[str]] = None) -> List[str]:
    if labels is not None and len(labels) == n:
        return [str(x) for x in labels]
    return [letter_label(i) for i in range(n)]


def sunflower_points(
    n: int,
    seed: int = DEFAULT_LAYOUT_SEED,
    width: float = LAYOUT_WIDTH,
    height: float = LAYOUT_HEIGHT,
    margin: float = LAYOUT_MARGIN,
) -> List[Tuple[float, float]]:
    """Spread ``n`` points over a rectangle on a jittered golden-angle spiral."""
    rng = np.random.default_rng(seed)
    w, h = width - 2 * margin, height - 2 * margin
    g = (math.sqrt(5) - 1) / 2
    points = []
    for i in range(n):
        r = math.sqrt((i + 0.5) / n)
        theta = 2 * math.pi * g * i
        x = w / 2 + (w / 2 - 12) * r * math.cos(theta) + (rng.random() - 0.5) * 14
        y = h / 2 + (h / 2 - 12) * r * math.sin(theta) + (rng.random() - 0.5) * 14
        points.append((x + margin, y + margin))
    return points


def random_points(
    n: int,
    seed: Optional[int] = None,
    width: float = LAYOUT_WIDTH,
    height: float = LAYOUT_HEIGHT,
    margin: float = LAYOUT_MARGIN,
    max_tries: int = 4000,
) -> List[Tuple[float, float]]:
    """
    Scatter ``n`` points uniformly, keeping them apart.

    Candidates closer than the minimum distance to an accepted point are
    rejected; every 800 rejections the minimum shrinks by 8% (down to 12px).
    Points still missing after ``max_tries`` rejections come from the spiral.
    """
    rng = np.random.default_rng(seed)
    w, h = width - 2 * margin, height - 2 * margin
    min_dist = 0.55 * math.sqrt(w * h / max(1, n))
    min_dist_floor = 12.0
    points: List[Tuple[float, float]] = []
    tries = 0
    while len(points) < n and tries < max_tries:
        x = margin + rng.random() * w
        y = margin + rng.random() * h
        if all((x - px) ** 2 + (y - py) ** 2 >= min_dist * min_dist for px, py in points):
            points.append((x, y))
            continue
        tries += 1
        if tries % 800 == 0 and min_dist > min_dist_floor:
            min_dist = max(min_dist * 0.92, min_dist_floor)
    if len(points) < n:
        logger.debug("placed %d of %d points at random, filling the rest from the spiral", len(points), n)
        rest = sunflower_points(n - len(points), int(rng.integers(2**31)), width, height, margin)
        points.extend(rest)
    return points


LAYOUTS = {
    "uniform": sunflower_points,
    "random": random_points,
}


def _level_points(level: dict) -> List[Tuple[float, float]]:
    nodes = level.get("nodes")
    if isinstance(nodes, list) and nodes and not level.get("layout"):
        try:
            ordered = sorted(nodes, key=lambda node: node["id"])
            if [node["id"] for node in ordered] != list(range(len(ordered))):
                raise ValueError("level node ids must be exactly 0..N-1")
            return [(float(node["x"]), float(node["y"])) for node in ordered]
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed level node list: {exc!r}") from exc
    n = level.get("n")
    if n is None:
        n = len(nodes) if isinstance(nodes, list) else 0
    if not isinstance(n, int) or isinstance(n, bool) or n < 0:
        raise ValueError(f"level 'n' must be a non-negative integer, got {n!r}")
    layout = str(level.get("layout") or "uniform").lower()
    if layout not in LAYOUTS:
        raise ValueError(f"unknown level layout {layout!r}; expected one of {sorted(LAYOUTS)}")
    seed = level.get("seed")
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise ValueError(f"level 'seed' must be an integer, got {seed!r}")
    if layout == "uniform" and seed is None:
        seed = DEFAULT_LAYOUT_SEED
    return LAYOUTS[layout](n, seed)


def _level_edges(level: dict) -> Optional[List[Tuple[int, int]]]:
    edges = level.get("edges")
    if not isinstance(edges, list) or not edges:
        return None
    try:
        return [(int(e["u"]), int(e["v"])) for e in edges]
    except (KeyError, TypeError) as exc:
        raise ValueError(f"malformed level edge list (expected {{'u': .., 'v': ..}}): {exc!r}") from exc


def level_from_dict(level: dict, name: str = "level", path: Path = Path(".")) -> Instance:
    points = _level_points(level)
    edge_pairs = _level_edges(level)
    start = level.get("start")
    if start is not None and (not isinstance(start, int) or isinstance(start, bool)):
        raise ValueError(f"level 'start' must be an integer node id, got {start!r}")
    # A level without "start" lets the ant colony pick random starting nodes.
    graph = WeightedGraph.from_points(points, edges=edge_pairs, start=start)
    return Instance(
        name=str(level.get("name", name)),
        path=path,
        graph=graph,
        points=points,
        labels=make_labels(len(points), level.get("labels")),
    )


def load_level(path: Path) -> Instance:
    path = Path(path)
    try:
        level = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"{path} is not valid level JSON: {exc}") from exc
    if not isinstance(level, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return level_from_dict(level, name=path.stem, path=path)


def _solution_candidates(path: Path) -> Iterable[Path]:
    yield path.with_suffix(".opt.tour")
    for ext in (".opt.tour", ".opt", ".tour"):
        yield path.parent / "solutions" / f"{path.stem}{ext}"


def _load_optimum(problem, path: Path) -> Optional[float]:
    for candidate in _solution_candidates(path):
        if not candidate.exists():
            continue
        tour_file = tsplib95.load(candidate)
        if not tour_file.tours:
            continue
        nodes = list(tour_file.tours[0])
        dist = 0.0
        for i in range(len(nodes)):
            a = nodes[i]
            b = nodes[(i + 1) % len(nodes)]
            dist += problem.get_weight(a, b)
        return float(dist)
    return None


def load_tsplib(path: Path) -> Instance:
    path = Path(path)
    problem = tsplib95.load(path)
    raw = problem.get_graph(normalize=True)
    graph = nx.DiGraph() if raw.is_directed() else nx.Graph()
    graph.add_nodes_from(raw.nodes())
    graph.add_weighted_edges_from((u, v, w) for u, v, w in raw.edges(data="weight") if u != v)
    points = []
    if problem.node_coords:
        points = [tuple(problem.node_coords[k][:2]) for k in sorted(problem.node_coords)]
    return Instance(
        name=problem.name or path.stem,
        path=path,
        graph=WeightedGraph(graph, start=0),
        optimum=_load_optimum(problem, path),
        points=points,
        labels=make_labels(graph.number_of_nodes()),
    )


def load_instance(path: Path) -> Instance:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    if path.suffix.lower() == ".json":
        return load_level(path)
    return load_tsplib(path)
