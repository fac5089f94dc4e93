"""
Backtracking solver for Pips puzzles

Strategy:
1. Always extend the tiling at the first uncovered cell (cell-list order)
2. Try every unused domino against every free active neighbour
3. Prune only structurally (overlap, repeated edge) while descending
4. Check region rules once, on each complete tiling; a failing tiling is a dead end

Rules only look at domino pip sums, so two unused dominoes with the same sum
are interchangeable at a given edge. The second one is skipped; this never
changes which solution is found first.
"""

import time
from typing import List, Set, Tuple, Optional

from .puzzle import Puzzle, Cell, Domino, Placement
from .edges import Edge, adjacent_cells, normalize_edge, edge_to_placement
from .constraints import ConstraintChecker


class BacktrackingSolver:
    def __init__(self, puzzle: Puzzle, verbose: bool = False,
                 max_nodes: Optional[int] = None, skip_equal_sums: bool = True):
        self.puzzle = puzzle
        self.verbose = verbose
        self.max_nodes = max_nodes  # exploration budget, None = unbounded
        self.skip_equal_sums = skip_equal_sums
        self.stats = {
            'nodes': 0,
            'backtracks': 0,
            'complete_tilings': 0,
            'rejected_tilings': 0,
            'budget_exhausted': False,
            'timed_out': False,
        }
        self.cells: List[Cell] = list(puzzle.cells)
        self.active: Set[Cell] = set(self.cells)

        # Search state
        self.covered: Set[Cell] = set()
        self.used: Set[str] = set()
        self.chosen_edges: Set[Edge] = set()
        self.assignments: List[Tuple[Edge, Domino]] = []

        self.start_time = 0.0
        self.timeout: Optional[float] = None

    # -------------------------------------------------------------------------
    # Main solving driver
    # -------------------------------------------------------------------------
    def solve(self, timeout_seconds: Optional[float] = None) -> Optional[Puzzle]:
        """
        Search for a complete tiling satisfying every region.
        Returns the solved puzzle (placements filled in) or None.
        """
        self.start_time = time.time()
        self.timeout = timeout_seconds

        if self.verbose:
            print(f"Starting backtracking solver: {self.puzzle}")

        if len(self.cells) % 2 != 0:
            if self.verbose:
                print(f"✗ Odd cell count ({len(self.cells)}), no tiling exists")
            return None

        if len(self.puzzle.available_dominoes) * 2 < len(self.cells):
            if self.verbose:
                print("✗ Not enough dominoes to cover the board")
            return None

        self._reset()
        solution = self._backtrack(0)

        if self.verbose:
            print("\n✓ Puzzle solved!" if solution is not None else "\n✗ No solution found")
            self._print_stats()

        if solution is None:
            return None
        return self.puzzle.with_placements(solution)

    def _reset(self) -> None:
        self.covered = set()
        self.used = set()
        self.chosen_edges = set()
        self.assignments = []

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------
    def _out_of_budget(self) -> bool:
        if self.max_nodes is not None and self.stats['nodes'] >= self.max_nodes:
            self.stats['budget_exhausted'] = True
            return True
        if self.timeout is not None and time.time() - self.start_time > self.timeout:
            self.stats['timed_out'] = True
            return True
        return False

    def _first_uncovered(self) -> Optional[Cell]:
        for cell in self.cells:
            if cell not in self.covered:
                return cell
        return None

    def _backtrack(self, depth: int) -> Optional[List[Placement]]:
        first = self._first_uncovered()
        if first is None:
            return self._check_complete_tiling()

        if self._out_of_budget():
            return None

        self.stats['nodes'] += 1
        if self.verbose and self.stats['nodes'] % 10000 == 0:
            print(f"  Progress: nodes={self.stats['nodes']} | "
                  f"tilings={self.stats['complete_tilings']} | depth={depth}")

        neighbors = [n for n in adjacent_cells(first)
                     if n in self.active and n not in self.covered]
        if not neighbors:
            return None

        tried_sums: Set[Tuple[int, Edge]] = set()

        for domino in self.puzzle.available_dominoes:
            if domino.id in self.used:
                continue

            for neighbor in neighbors:
                edge = normalize_edge((first, neighbor))
                if edge in self.chosen_edges:
                    continue
                if edge[0] in self.covered or edge[1] in self.covered:
                    continue

                if self.skip_equal_sums:
                    key = (domino.sum(), edge)
                    if key in tried_sums:
                        continue
                    tried_sums.add(key)

                self._commit(edge, domino)
                result = self._backtrack(depth + 1)
                if result is not None:
                    return result
                self._undo(edge, domino)
                self.stats['backtracks'] += 1

                if self.stats['budget_exhausted'] or self.stats['timed_out']:
                    return None

        return None

    def _check_complete_tiling(self) -> Optional[List[Placement]]:
        self.stats['complete_tilings'] += 1
        placements = [edge_to_placement(edge, domino.id) for edge, domino in self.assignments]
        result = ConstraintChecker.validate_puzzle(self.puzzle.with_placements(placements))
        if result.is_valid:
            return placements
        self.stats['rejected_tilings'] += 1
        return None

    # -------------------------------------------------------------------------
    # Domino placement/removal
    # -------------------------------------------------------------------------
    def _commit(self, edge: Edge, domino: Domino) -> None:
        self.covered.add(edge[0])
        self.covered.add(edge[1])
        self.used.add(domino.id)
        self.chosen_edges.add(edge)
        self.assignments.append((edge, domino))

    def _undo(self, edge: Edge, domino: Domino) -> None:
        self.assignments.pop()
        self.chosen_edges.discard(edge)
        self.used.discard(domino.id)
        self.covered.discard(edge[0])
        self.covered.discard(edge[1])

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------
    def _print_stats(self) -> None:
        """Print solving statistics."""
        print("\nSolving Statistics:")
        print(f"  Nodes expanded: {self.stats['nodes']}")
        print(f"  Backtracks: {self.stats['backtracks']}")
        print(f"  Complete tilings checked: {self.stats['complete_tilings']}")
        print(f"  Tilings rejected by rules: {self.stats['rejected_tilings']}")
        if self.stats['budget_exhausted']:
            print("  ⚠ Exploration budget exhausted")
        if self.stats['timed_out']:
            print("  ⚠ Timed out")


def solve_puzzle(puzzle: Puzzle, verbose: bool = False,
                 max_nodes: Optional[int] = None,
                 timeout_seconds: Optional[float] = None) -> Optional[Puzzle]:
    """
    Solve from scratch. None means no solution was found.

    Region rules are only checked on complete tilings, so the search grows
    quickly with board size: small boards finish at once, but medium and
    hard boards can run for minutes or longer. Pass `max_nodes` or
    `timeout_seconds` to bound it; running out also returns None.
    """
    solver = BacktrackingSolver(puzzle, verbose=verbose, max_nodes=max_nodes)
    return solver.solve(timeout_seconds=timeout_seconds)
