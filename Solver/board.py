# Solver/board.py
from __future__ import annotations
import numpy as np
from dataclasses import dataclass, field, replace
from typing import List, Tuple

from .puzzle import Puzzle, Cell, Domino
from .edges import Edge, placement_to_edge, edge_to_placement

EMPTY = -1

# --------------------------- Models ---------------------------

@dataclass
class Board:
    """Pip grid over the bounding box. EMPTY marks cells without a pip."""
    cells: np.ndarray                                    # int8, shape (rows, cols)
    domino_places: List[Tuple[Domino, Edge]] = field(default_factory=list)

    @property
    def rows(self) -> int:
        return int(self.cells.shape[0])

    @property
    def cols(self) -> int:
        return int(self.cells.shape[1])

# --------------------------- Construction ---------------------------

def create_empty_board(rows: int, cols: int) -> Board:
    return Board(cells=np.full((rows, cols), EMPTY, dtype=np.int8))


def place_domino_on_board(domino: Domino, edge: Edge, board: Board) -> Board:
    """Returns a new board; `board` is left untouched. First edge cell gets `left`."""
    cells = board.cells.copy()
    first, second = edge
    cells[first.row, first.col] = domino.left
    cells[second.row, second.col] = domino.right
    return replace(board, cells=cells, domino_places=board.domino_places + [(domino, edge)])


def board_from_puzzle(puzzle: Puzzle) -> Board:
    """Board with every current placement applied. Unknown domino ids are skipped."""
    board = create_empty_board(puzzle.rows, puzzle.cols)
    for placement in puzzle.placements:
        domino = puzzle.domino_by_id(placement.domino_id)
        if domino is None:
            continue
        board = place_domino_on_board(domino, placement_to_edge(placement), board)
    return board


def puzzle_from_board(board: Board, puzzle: Puzzle) -> Puzzle:
    placements = []
    for domino, edge in board.domino_places:
        match = next((d for d in puzzle.available_dominoes if d.matches(domino)), None)
        if match is None:
            raise ValueError(f"Domino {domino.left}-{domino.right} not found in available dominoes")
        placements.append(edge_to_placement(edge, match.id))
    return puzzle.with_placements(placements)

# --------------------------- Queries ---------------------------

def cell_value(board: Board, cell: Cell) -> int:
    if not (0 <= cell.row < board.rows and 0 <= cell.col < board.cols):
        return EMPTY
    return int(board.cells[cell.row, cell.col])


def is_cell_empty(board: Board, cell: Cell) -> bool:
    return cell_value(board, cell) == EMPTY


def is_cell_occupied(board: Board, cell: Cell) -> bool:
    return 0 <= cell_value(board, cell) <= 6


def active_mask(puzzle: Puzzle) -> np.ndarray:
    """Boolean mask of active cells over the bounding box."""
    mask = np.zeros((puzzle.rows, puzzle.cols), dtype=bool)
    for cell in puzzle.cells:
        if 0 <= cell.row < puzzle.rows and 0 <= cell.col < puzzle.cols:
            mask[cell.row, cell.col] = True
    return mask
