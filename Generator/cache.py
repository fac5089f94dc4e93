"""
Seed -> solution cache.

Purely an optimisation: regenerating a puzzle from its seed gives the same
solution with or without it. Writes are best effort and never raise.
"""
from typing import List, Dict, Optional, Iterable

from Solver.puzzle import Placement, Puzzle


class SolutionCache:
    def __init__(self, max_size: int = 1000):
        self.max_size = max_size
        self.cache: Dict[str, List[Placement]] = {}

    def get(self, seed: str) -> Optional[List[Placement]]:
        solution = self.cache.get(seed)
        return list(solution) if solution is not None else None

    def set(self, seed: str, solution: List[Placement]) -> None:
        # FIFO eviction, oldest insert first
        if seed not in self.cache and len(self.cache) >= self.max_size:
            try:
                oldest = next(iter(self.cache), None)
            except RuntimeError:
                # dict changed size under us (another thread); skip this eviction
                oldest = None
            if oldest is not None:
                self.cache.pop(oldest, None)
        self.cache[seed] = list(solution)

    def has(self, seed: str) -> bool:
        return seed in self.cache

    def clear(self) -> None:
        self.cache.clear()

    def size(self) -> int:
        return len(self.cache)

    def pre_populate(self, puzzles: Iterable[Puzzle]) -> None:
        for puzzle in puzzles:
            if puzzle.solution:
                self.set(puzzle.seed, puzzle.solution)
