import math
import time
from typing import Dict, List, Optional

from .graph import WeightedGraph
from .solvers.base import SolveResult, Solver, tour_length
from .stepper import Stepper


def evaluate_solver(solver: Solver, graph: WeightedGraph, optimum: Optional[float] = None) -> SolveResult:
    start = time.perf_counter()
    tour = solver.solve(graph)
    runtime = time.perf_counter() - start
    length = tour_length(graph, tour) if tour is not None else float("inf")
    return SolveResult(
        tour=tour,
        length=length,
        solver_name=solver.name,
        runtime=runtime,
        optimum=optimum,
    )


def evaluate_stepper(stepper: Stepper, optimum: Optional[float] = None, on_step=None) -> SolveResult:
    """Drive ``stepper`` to completion and report its best tour."""
    start = time.perf_counter()
    snap = stepper.run(on_step=on_step)
    runtime = time.perf_counter() - start
    return SolveResult(
        tour=snap.best_tour,
        length=snap.best_length,
        solver_name=stepper.name,
        runtime=runtime,
        optimum=optimum,
    )


def best_result(results: List[SolveResult]) -> Optional[SolveResult]:
    feasible = [r for r in results if r.feasible]
    if not feasible:
        return None
    return min(feasible, key=lambda r: r.length)


def summarize(results: List[SolveResult]) -> Dict[str, float]:
    if not results:
        return {"feasible": 0, "best_length": float("inf"), "runtime": 0.0, "gap": float("inf")}
    best = best_result(results)
    gaps = [r.gap for r in results if not math.isinf(r.gap)]
    return {
        "feasible": sum(1 for r in results if r.feasible),
        "best_length": best.length if best else float("inf"),
        "runtime": sum(r.runtime for r in results),
        "gap": sum(gaps) / len(gaps) if gaps else float("inf"),
    }
