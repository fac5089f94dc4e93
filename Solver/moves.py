"""
Player moves on a puzzle. Every operation returns a new Puzzle; the one
passed in is never mutated.
"""
from typing import List, Optional, Tuple

from .puzzle import Puzzle, Placement, Cell, HORIZONTAL, VERTICAL
from .edges import are_adjacent, edge_to_placement, coverage_map
from .constraints import ConstraintChecker


def create_placement_from_cells(cell1: Cell, cell2: Cell, domino_id: str) -> Placement:
    """Anchor is the left/top cell. Raises EdgeError for non-adjacent cells."""
    return edge_to_placement((cell1, cell2), domino_id)


def placement_for_cell(puzzle: Puzzle, cell: Cell) -> Optional[Placement]:
    return coverage_map(puzzle.placements).get(cell)


def is_domino_placed(puzzle: Puzzle, domino_id: str) -> bool:
    return any(p.domino_id == domino_id for p in puzzle.placements)


def is_complete(puzzle: Puzzle) -> bool:
    """Every active cell is covered by some placement."""
    covered = coverage_map(puzzle.placements)
    return all(cell in covered for cell in puzzle.cells)


def add_placement(puzzle: Puzzle, placement: Placement) -> Puzzle:
    """Append without checking; callers validate first."""
    return puzzle.with_placements(puzzle.placements + [placement])


def place_domino(puzzle: Puzzle, first: Cell, second: Cell,
                 domino_id: str) -> Tuple[Puzzle, Optional[str]]:
    """
    Two-click placement: validate, then add.
    Returns (new puzzle, None) on success or (unchanged puzzle, reason).
    """
    if not are_adjacent(first, second):
        return puzzle, "Cells must be adjacent"

    placement = create_placement_from_cells(first, second, domino_id)
    check = ConstraintChecker.validate_placement(puzzle, placement)
    if not check.is_valid:
        return puzzle, check.error or "Invalid placement"
    return add_placement(puzzle, placement), None


def remove_placement_at(puzzle: Puzzle, row: int, col: int) -> Puzzle:
    placement = placement_for_cell(puzzle, Cell(row, col))
    if placement is None:
        return puzzle
    return _without(puzzle, placement)


def rotate_placement(puzzle: Puzzle, placement: Placement) -> Puzzle:
    """Toggle orientation around the anchor; unchanged if the result is invalid."""
    rotated = placement.rotated()
    check = ConstraintChecker.validate_placement(_without(puzzle, placement), rotated)
    if not check.is_valid:
        return puzzle
    return puzzle.with_placements(
        [rotated if p.domino_id == placement.domino_id else p for p in puzzle.placements]
    )


def move_placement(puzzle: Puzzle, placement: Placement,
                   target: Cell) -> Tuple[Puzzle, Optional[str]]:
    """
    Drag a placed domino so that it covers `target`. Candidates are tried
    horizontal then vertical, target as anchor then as second cell; the
    first candidate that validates wins.
    """
    remaining = _without(puzzle, placement)
    last_error = None

    for candidate in _drag_candidates(placement, target):
        if not all(puzzle.in_bounds(c) for c in candidate.cells()):
            continue
        check = ConstraintChecker.validate_placement(remaining, candidate)
        if check.is_valid:
            return add_placement(remaining, candidate), None
        last_error = check.error

    if last_error is None:
        return puzzle, "Cannot place domino at target position (out of bounds)"
    return puzzle, last_error


def _drag_candidates(placement: Placement, target: Cell) -> List[Placement]:
    candidates = []
    for orientation in (HORIZONTAL, VERTICAL):
        candidates.append(Placement(placement.domino_id, target.row, target.col, orientation))
        if orientation == HORIZONTAL:
            candidates.append(Placement(placement.domino_id, target.row, target.col - 1, orientation))
        else:
            candidates.append(Placement(placement.domino_id, target.row - 1, target.col, orientation))
    return candidates


def _without(puzzle: Puzzle, placement: Placement) -> Puzzle:
    return puzzle.with_placements(p for p in puzzle.placements if p.domino_id != placement.domino_id)
