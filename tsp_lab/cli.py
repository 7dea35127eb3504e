import argparse
import random
import sys
import time
from pathlib import Path
from typing import List, Optional

from tsp_lab.colony import AntColonyConfig, AntColonyStepper
from tsp_lab.data import Instance, load_instance
from tsp_lab.evaluation import evaluate_solver, evaluate_stepper, summarize
from tsp_lab.evolutionary import GeneticConfig, GeneticStepper
from tsp_lab.solvers import (
    BRUTE_FORCE_PRACTICAL_LIMIT,
    HELD_KARP_PRACTICAL_LIMIT,
    TOUR_CLOSING_FORBIDDEN,
    TOUR_INCOMPLETE,
    TOUR_OK,
    BruteForceSolver,
    HeldKarpSolver,
    NearestNeighborSolver,
    SolveResult,
    TwoOptSolver,
    check_user_tour,
    tour_length,
)
from tsp_lab.stepper import Stepper, StepperSnapshot


ALGORITHMS = ["nn", "2opt", "aco", "ga", "hk", "bf"]
TITLES = {
    "nn": "Nearest Neighbor",
    "2opt": "2-Opt",
    "aco": "Ant Colony Opt.",
    "ga": "Genetic Algorithm",
    "hk": "Held-Karp",
    "bf": "Brute Force",
}
EXACT = {"hk", "bf"}


def log(msg: str) -> None:
    ts = time.strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", flush=True)


def _fmt(length: float) -> str:
    return f"{length:.1f}" if length != float("inf") else "n/d"


def _parse_tour(text: Optional[str]) -> Optional[List[int]]:
    if not text:
        return None
    return [int(tok) for tok in text.replace(",", " ").split()]


def build_stepper(key: str, inst: Instance, args) -> Stepper:
    rng = random.Random(args.seed) if args.seed is not None else None
    if key == "aco":
        cfg = AntColonyConfig(
            alpha=args.alpha,
            beta=args.beta,
            rho=args.rho,
            ants=args.ants,
            iterations=args.iterations,
            candidate_k=args.candidate_k,
        )
        return AntColonyStepper(inst.graph, cfg, rng=rng)
    cfg = GeneticConfig(
        population_size=args.population,
        generations=args.generations,
        mutation_rate=args.mutation_rate,
        tournament_size=args.tournament,
    )
    return GeneticStepper(inst.graph, cfg, rng=rng)


def _gated(key: str, inst: Instance, force: bool) -> bool:
    n = inst.graph.n
    if key == "hk" and n > HELD_KARP_PRACTICAL_LIMIT:
        log(f"Held-Karp is heavy: recommended <= {HELD_KARP_PRACTICAL_LIMIT} cities (this level has {n}).")
        return not force
    if key == "bf" and n > BRUTE_FORCE_PRACTICAL_LIMIT:
        log(f"Brute Force is feasible up to ~{BRUTE_FORCE_PRACTICAL_LIMIT} cities (this level has {n}).")
        return not force
    return False


def run_algorithm(key: str, inst: Instance, args) -> Optional[SolveResult]:
    if _gated(key, inst, args.force):
        log(f"{TITLES[key]}: skipped (use --force to run anyway)")
        return None
    if key == "nn":
        return evaluate_solver(NearestNeighborSolver(), inst.graph, inst.optimum)
    if key == "2opt":
        solver = TwoOptSolver(_parse_tour(args.tour), max_passes=args.max_passes)
        result = evaluate_solver(solver, inst.graph, inst.optimum)
        if not result.feasible:
            log("2-Opt needs an initial tour (your full tour or NN).")
            return None
        return result
    if key == "hk":
        return evaluate_solver(HeldKarpSolver(), inst.graph, inst.optimum)
    if key == "bf":
        return evaluate_solver(BruteForceSolver(prune=args.prune), inst.graph, inst.optimum)
    return evaluate_stepper(build_stepper(key, inst, args), inst.optimum)


def report_user_tour(inst: Instance, text: Optional[str]) -> None:
    tour = _parse_tour(text)
    if tour is None:
        return
    status = check_user_tour(inst.graph, tour)
    if status == TOUR_INCOMPLETE:
        log("You must visit all cities before closing the tour.")
    elif status == TOUR_CLOSING_FORBIDDEN:
        log("Returning to the start is forbidden in this level.")
    elif status != TOUR_OK:
        log("Your tour repeats a city or uses a missing road.")
    else:
        log(f"You: length={_fmt(tour_length(inst.graph, tour))}")


def load(path: str) -> Instance:
    try:
        inst = load_instance(Path(path))
    except (OSError, ValueError) as exc:
        raise SystemExit(f"error: cannot load {path}: {exc}")
    log(f"loaded {inst.name}: {inst.graph.n} cities, {inst.graph.graph.number_of_edges()} roads, start={inst.graph.start}")
    return inst


def solve(args) -> None:
    inst = load(args.path)
    report_user_tour(inst, args.tour)
    keys = [k.strip() for k in args.algorithms.split(",") if k.strip()]
    unknown = [k for k in keys if k not in ALGORITHMS]
    if unknown:
        raise SystemExit(f"error: unknown algorithm(s): {', '.join(unknown)}")
    results: List[SolveResult] = []
    for key in keys:
        result = run_algorithm(key, inst, args)
        if result is None:
            continue
        results.append(result)
        if not result.feasible:
            log(f"{TITLES[key]}: no tour found (check connectivity)")
            continue
        suffix = " (optimal)" if key in EXACT else ""
        line = f"{TITLES[key]}: length={_fmt(result.length)}{suffix} runtime={result.runtime:.3f}s"
        if inst.optimum is not None:
            line += f" gap={result.gap:.2%}"
        log(line)
        if args.verbose:
            print("  " + " ".join(inst.labels[v] for v in result.tour))
    stats = summarize(results)
    log(f"best={_fmt(stats['best_length'])} feasible={stats['feasible']}/{len(results)}")


def step(args) -> None:
    inst = load(args.path)
    stepper = build_stepper(args.algorithm, inst, args)
    unit = "iteration" if args.algorithm == "aco" else "generation"

    def on_frame(snap: StepperSnapshot) -> None:
        print(f"{unit} {snap.progress}: best={_fmt(snap.best_length)}", flush=True)
        if args.delay > 0 and not snap.done:
            time.sleep(args.delay)

    try:
        snap = stepper.run(on_step=on_frame)
    except KeyboardInterrupt:
        snap = stepper.snapshot()
        log("Interrupted.")
    if snap.best_tour is None:
        log(f"{TITLES[args.algorithm]}: no tour found after {snap.progress} {unit}s")
    else:
        log(f"{TITLES[args.algorithm]}: best={_fmt(snap.best_length)} tour={snap.best_tour}")


def _add_stepper_args(parser: argparse.ArgumentParser) -> None:
    aco = AntColonyConfig()
    ga = GeneticConfig()
    parser.add_argument("--seed", type=int, default=None, help="Seed for the stochastic solvers")
    parser.add_argument("--alpha", type=float, default=aco.alpha)
    parser.add_argument("--beta", type=float, default=aco.beta)
    parser.add_argument("--rho", type=float, default=aco.rho)
    parser.add_argument("--ants", type=int, default=aco.ants)
    parser.add_argument("--iterations", type=int, default=aco.iterations)
    parser.add_argument("--candidate-k", type=int, default=aco.candidate_k)
    parser.add_argument("--population", type=int, default=ga.population_size)
    parser.add_argument("--generations", type=int, default=ga.generations)
    parser.add_argument("--mutation-rate", type=float, default=ga.mutation_rate)
    parser.add_argument("--tournament", type=int, default=ga.tournament_size)


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="TSP lab CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    solve_parser = subparsers.add_parser("solve", help="Run solvers on a level (.json) or TSPLIB (.tsp) file")
    solve_parser.add_argument("path")
    solve_parser.add_argument("--algorithms", default=",".join(ALGORITHMS))
    solve_parser.add_argument("--tour", default=None, help="Your own tour, e.g. '0,3,1,2'; also seeds 2-Opt")
    solve_parser.add_argument("--max-passes", type=int, default=6)
    solve_parser.add_argument("--prune", action="store_true", help="Bound the brute-force search")
    solve_parser.add_argument("--force", action="store_true", help="Run exact solvers past their practical size")
    solve_parser.add_argument("-v", "--verbose", action="store_true")
    _add_stepper_args(solve_parser)
    solve_parser.set_defaults(func=solve)

    step_parser = subparsers.add_parser("step", help="Drive a metaheuristic one iteration at a time")
    step_parser.add_argument("path")
    step_parser.add_argument("--algorithm", choices=["aco", "ga"], default="aco")
    step_parser.add_argument("--delay", type=float, default=0.18, help="Seconds between frames")
    _add_stepper_args(step_parser)
    step_parser.set_defaults(func=step)

    args = parser.parse_args(argv)
    try:
        args.func(args)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
