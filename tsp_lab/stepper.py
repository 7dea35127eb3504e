"""
Resumable search: one unit of work per ``step()`` call.

A driver (a timer, a CLI loop, a test) creates a stepper once and calls
``step()`` until the returned snapshot says ``done``. Stopping early is just
not calling it again; every call leaves the stepper consistent.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from .solvers.base import Tour


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepperSnapshot:
    done: bool
    progress: int
    best_tour: Optional[Tour]
    best_length: float


class Stepper(ABC):
    name: str = "stepper"

    def __init__(self, budget: int):
        self.budget = budget
        self.progress = 0
        self.best_tour: Optional[Tour] = None
        self.best_length = math.inf
        # Set when there is nothing left to search, regardless of budget.
        self.exhausted = False

    @property
    def done(self) -> bool:
        return self.exhausted or self.progress >= self.budget

    @abstractmethod
    def advance(self) -> None:
        """Perform exactly one iteration / generation of work."""
        raise NotImplementedError

    def step(self) -> StepperSnapshot:
        if not self.done:
            self.advance()
            self.progress += 1
            if self.done:
                logger.debug("%s finished after %d steps, best=%s", self.name, self.progress, self.best_length)
        return self.snapshot()

    def snapshot(self) -> StepperSnapshot:
        return StepperSnapshot(
            done=self.done,
            progress=self.progress,
            best_tour=list(self.best_tour) if self.best_tour is not None else None,
            best_length=self.best_length,
        )

    def offer(self, tour: Tour, length: float) -> bool:
        """Record ``tour`` as the best so far if it is strictly shorter."""
        if math.isfinite(length) and length < self.best_length:
            self.best_tour = list(tour)
            self.best_length = length
            return True
        return False

    def run(
        self,
        max_steps: Optional[int] = None,
        on_step: Optional[Callable[[StepperSnapshot], None]] = None,
    ) -> StepperSnapshot:
        """Drive ``step()`` synchronously until done or ``max_steps`` calls."""
        snap = self.snapshot()
        taken = 0
        while not snap.done and (max_steps is None or taken < max_steps):
            snap = self.step()
            taken += 1
            if on_step is not None:
                on_step(snap)
        return snap
