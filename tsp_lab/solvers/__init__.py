from .base import (
    TOUR_BROKEN,
    TOUR_CLOSING_FORBIDDEN,
    TOUR_INCOMPLETE,
    TOUR_OK,
    Solver,
    SolveResult,
    Tour,
    check_user_tour,
    is_complete,
    is_valid_tour,
    tour_length,
)
from .exact import (
    BRUTE_FORCE_PRACTICAL_LIMIT,
    HELD_KARP_PRACTICAL_LIMIT,
    BruteForceSolver,
    HeldKarpSolver,
    brute_force,
    held_karp,
)
from .heuristics import (
    NearestNeighborSolver,
    TwoOptSolver,
    nearest_neighbor_tour,
    two_opt,
)

__all__ = [
    "Solver",
    "SolveResult",
    "Tour",
    "tour_length",
    "is_complete",
    "is_valid_tour",
    "check_user_tour",
    "TOUR_OK",
    "TOUR_INCOMPLETE",
    "TOUR_CLOSING_FORBIDDEN",
    "TOUR_BROKEN",
    "NearestNeighborSolver",
    "TwoOptSolver",
    "nearest_neighbor_tour",
    "two_opt",
    "HeldKarpSolver",
    "BruteForceSolver",
    "held_karp",
    "brute_force",
    "HELD_KARP_PRACTICAL_LIMIT",
    "BRUTE_FORCE_PRACTICAL_LIMIT",
]
