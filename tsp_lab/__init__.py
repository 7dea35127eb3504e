"""
Exact, heuristic and resumable metaheuristic solvers for the TSP on graphs with forbidden edges.
"""

__all__ = [
    "graph",
    "solvers",
    "stepper",
    "colony",
    "evolutionary",
    "evaluation",
    "data",
]
