import json
import math

import pytest

from tsp_lab.data import (
    letter_label,
    level_from_dict,
    load_instance,
    load_level,
    load_tsplib,
    make_labels,
    random_points,
    sunflower_points,
)
from tsp_lab.graph import FORBIDDEN
from tsp_lab.solvers import held_karp, tour_length


SQUARE_TSP = """NAME : square4
TYPE : TSP
COMMENT : four corners of a square
DIMENSION : 4
EDGE_WEIGHT_TYPE : EUC_2D
NODE_COORD_SECTION
1 0 0
2 10 0
3 10 10
4 0 10
EOF
"""

SQUARE_TOUR = """NAME : square4.opt.tour
TYPE : TOUR
DIMENSION : 4
TOUR_SECTION
1
2
3
4
-1
EOF
"""


def test_letter_labels():
    assert [letter_label(k) for k in (0, 25, 26, 27, 51, 52)] == ["A", "Z", "AA", "AB", "AZ", "BA"]
    assert make_labels(3) == ["A", "B", "C"]
    assert make_labels(2, ["x", "y"]) == ["x", "y"]
    assert make_labels(2, ["only-one"]) == ["A", "B"]


def test_sunflower_layout_is_seeded():
    assert sunflower_points(12, seed=5) == sunflower_points(12, seed=5)
    assert sunflower_points(12, seed=5) != sunflower_points(12, seed=6)
    pts = sunflower_points(30)
    assert len(pts) == 30
    assert all(0 <= x <= 800 and 0 <= y <= 600 for x, y in pts)


def test_level_with_explicit_nodes_and_edges():
    level = {
        "name": "tiny",
        "start": 1,
        "nodes": [{"id": 1, "x": 3, "y": 0}, {"id": 0, "x": 0, "y": 0}, {"id": 2, "x": 3, "y": 4}],
        "edges": [{"u": 0, "v": 1}, {"u": 1, "v": 2}],
    }
    inst = level_from_dict(level)
    g = inst.graph
    assert inst.name == "tiny"
    assert g.n == 3 and g.start == 1
    assert g.cost(0, 1) == pytest.approx(3.0)
    assert g.cost(2, 1) == pytest.approx(4.0)
    assert g.weight(0, 2) is FORBIDDEN
    assert held_karp(g) is None


def test_level_with_layout():
    inst = level_from_dict({"n": 8, "layout": "uniform", "seed": 3, "start": 0})
    assert inst.graph.n == 8
    assert inst.points == sunflower_points(8, seed=3)
    assert inst.labels == make_labels(8)


def test_level_without_start_leaves_it_open():
    inst = level_from_dict({"n": 5})
    assert inst.graph.start is None


def test_level_rejects_gapped_ids():
    with pytest.raises(ValueError):
        level_from_dict({"nodes": [{"id": 0, "x": 0, "y": 0}, {"id": 2, "x": 1, "y": 1}]})


def test_load_level_file(tmp_path):
    path = tmp_path / "10.json"
    path.write_text(json.dumps({"n": 6, "seed": 9, "start": 0}))
    inst = load_level(path)
    assert inst.name == "10"
    assert inst.graph.n == 6


def test_load_level_rejects_bad_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ValueError):
        load_level(path)
    path.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_level(path)


def test_load_tsplib_with_optimum(tmp_path):
    (tmp_path / "square4.tsp").write_text(SQUARE_TSP)
    (tmp_path / "square4.opt.tour").write_text(SQUARE_TOUR)
    inst = load_tsplib(tmp_path / "square4.tsp")
    assert inst.name == "square4"
    assert inst.graph.n == 4
    assert inst.optimum == pytest.approx(40.0)
    assert tour_length(inst.graph, held_karp(inst.graph)) == pytest.approx(40.0)
    assert len(inst.points) == 4


def test_load_instance_dispatch_and_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_instance(tmp_path / "nope.json")
    (tmp_path / "square4.tsp").write_text(SQUARE_TSP)
    assert load_instance(tmp_path / "square4.tsp").optimum is None


def test_random_layout_keeps_points_apart():
    pts = random_points(10, seed=4)
    assert pts == random_points(10, seed=4)
    assert len(pts) == 10
    assert all(36 <= x <= 764 and 36 <= y <= 564 for x, y in pts)
    # Starts at 0.55 * sqrt(728 * 528 / 10), about 107px, and only shrinks after many rejections.
    gaps = [math.dist(p, q) for i, p in enumerate(pts) for q in pts[i + 1 :]]
    assert min(gaps) > 60


def test_random_layout_falls_back_to_spiral_when_crowded():
    pts = random_points(40, seed=1, max_tries=0)
    assert len(pts) == 40
    assert all(0 <= x <= 800 and 0 <= y <= 600 for x, y in pts)


def test_level_with_random_layout():
    inst = level_from_dict({"n": 6, "layout": "random", "seed": 11, "start": 0})
    assert inst.points == random_points(6, seed=11)
    assert inst.graph.n == 6


def test_level_rejects_unknown_layout():
    with pytest.raises(ValueError, match="unknown level layout"):
        level_from_dict({"n": 6, "layout": "grid"})


@pytest.mark.parametrize(
    "level",
    [
        {"nodes": [{"id": 0, "x": 0}, {"id": 1, "x": 1, "y": 1}]},
        {"nodes": [[0, 0, 0], [1, 1, 1]]},
        {"n": 4, "edges": [{"from": 0, "to": 1}]},
        {"n": 4, "edges": [{"u": 0, "v": None}]},
        {"n": 4, "start": "0"},
        {"n": 4, "start": True},
        {"n": "4"},
        {"n": 4, "seed": "abc"},
    ],
)
def test_malformed_level_raises_value_error(level):
    with pytest.raises(ValueError):
        level_from_dict(level)
