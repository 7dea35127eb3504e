import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional

from .graph import WeightedGraph
from .solvers.base import Tour, tour_length
from .solvers.heuristics import nearest_neighbor_tour
from .stepper import Stepper


logger = logging.getLogger(__name__)


@dataclass
class GeneticConfig:
    population_size: int = 50
    generations: int = 60
    mutation_rate: float = 0.25
    tournament_size: int = 6
    elite_fraction: float = 0.12
    min_elite: int = 2
    # Random draws per requested tour before a fresh random tour is given up on.
    max_shuffle_attempts: int = 200
    random_seed: Optional[int] = None

    def __post_init__(self):
        if self.population_size < 2:
            raise ValueError("population_size must be at least 2")
        if self.generations < 0:
            raise ValueError("generations must be non-negative")
        if self.tournament_size < 1:
            raise ValueError("tournament_size must be at least 1")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ValueError("mutation_rate must lie in [0, 1]")
        if not 0.0 <= self.elite_fraction <= 1.0:
            raise ValueError("elite_fraction must lie in [0, 1]")
        if self.min_elite < 1:
            raise ValueError("min_elite must be at least 1")


class GeneticStepper(Stepper):
    """
    Generational GA over tours with a fixed start node, one generation per ``step()``.

    Every individual in the population is a valid closed tour; invalid children
    are replaced (crossover) or rolled back (mutation) instead of being kept.
    """

    name = "genetic"

    def __init__(self, graph: WeightedGraph, config: Optional[GeneticConfig] = None, rng: random.Random = None):
        self.cfg = config or GeneticConfig()
        super().__init__(self.cfg.generations)
        self.graph = graph
        self.rng = rng or random.Random(self.cfg.random_seed)
        self.start = graph.start_or_default()
        self.population: List[Tour] = []
        self.lengths: List[float] = []

        if graph.n < 3:
            # A single ordering exists; nothing to evolve.
            if graph.n:
                only = [self.start] + [v for v in graph.nodes if v != self.start]
                self.offer(only, tour_length(graph, only))
            self.exhausted = True
            return

        seed = nearest_neighbor_tour(graph, self.start) or list(graph.nodes)
        self.genes = [v for v in seed if v != self.start]
        self.population = self.initial_population()
        if not self.population:
            logger.debug("no valid random tour found for %r; genetic search has nothing to evolve", graph)
            self.exhausted = True
            return
        self.lengths = [tour_length(graph, t) for t in self.population]

    def valid(self, tour: Tour) -> bool:
        return math.isfinite(tour_length(self.graph, tour))

    def random_tour(self) -> Optional[Tour]:
        genes = self.genes[:]
        for _ in range(self.cfg.max_shuffle_attempts):
            self.rng.shuffle(genes)
            tour = [self.start] + genes
            if self.valid(tour):
                return tour
        return None

    def initial_population(self) -> List[Tour]:
        population: List[Tour] = []
        for _ in range(self.cfg.population_size):
            tour = self.random_tour()
            if tour is None:
                break
            population.append(tour)
        if not population:
            nn = nearest_neighbor_tour(self.graph, self.start)
            if nn is None:
                return []
            population.append(nn)
        # Pad with copies so the population size stays fixed.
        base = len(population)
        while len(population) < self.cfg.population_size:
            population.append(population[len(population) % base][:])
        return population

    def select_parent(self) -> Tour:
        best_idx = None
        for _ in range(self.cfg.tournament_size):
            idx = self.rng.randrange(len(self.population))
            if best_idx is None or self.lengths[idx] < self.lengths[best_idx]:
                best_idx = idx
        return self.population[best_idx]

    def crossover(self, p1: Tour, p2: Tour) -> Optional[Tour]:
        """Order crossover on the genes after the fixed start node."""
        a, b = p1[1:], p2[1:]
        n = len(a)
        i, j = self.rng.randrange(n), self.rng.randrange(n)
        lo, hi = min(i, j), max(i, j)
        child: List[Optional[int]] = [None] * n
        child[lo : hi + 1] = a[lo : hi + 1]
        taken = set(a[lo : hi + 1])
        slot = 0
        for gene in b:
            if gene in taken:
                continue
            while child[slot] is not None:
                slot += 1
            child[slot] = gene
            taken.add(gene)
        tour = [self.start] + child
        return tour if self.valid(tour) else None

    def mutate(self, tour: Tour) -> Tour:
        if self.rng.random() >= self.cfg.mutation_rate:
            return tour
        n = len(tour)
        i = 1 + self.rng.randrange(max(1, n - 3))
        j = i + 1 + self.rng.randrange(max(1, n - 1 - i))
        child = tour[:i] + tour[i:j][::-1] + tour[j:]
        return child if self.valid(child) else tour

    def elite_count(self) -> int:
        count = max(self.cfg.min_elite, int(self.cfg.population_size * self.cfg.elite_fraction))
        return min(count, self.cfg.population_size)

    def advance(self) -> None:
        order = sorted(range(len(self.population)), key=lambda k: self.lengths[k])
        self.population = [self.population[k] for k in order]
        self.lengths = [self.lengths[k] for k in order]
        self.offer(self.population[0], self.lengths[0])

        elites = self.elite_count()
        next_pop = [t[:] for t in self.population[:elites]]
        next_lengths = self.lengths[:elites]
        while len(next_pop) < self.cfg.population_size:
            p1 = self.select_parent()
            p2 = self.select_parent()
            child = self.crossover(p1, p2) or self.random_tour() or p1[:]
            child = self.mutate(child)
            next_pop.append(child)
            next_lengths.append(tour_length(self.graph, child))
        self.population = next_pop
        self.lengths = next_lengths
