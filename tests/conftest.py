import pytest

from Solver.puzzle import Puzzle, Cell, Domino, Region, Rule, RuleType


def grid_cells(rows, cols):
    return [Cell(r, c) for r in range(rows) for c in range(cols)]


@pytest.fixture
def build_puzzle():
    """
    Factory for small hand-built puzzles.

    regions: list of (region_id, [(row, col), ...], RuleType, value)
    dominoes: list of (left, right), ids are "d0", "d1", ...
    """
    def _build(rows, cols, regions, dominoes, cells=None, placements=None, seed="test"):
        cells = cells if cells is not None else grid_cells(rows, cols)
        return Puzzle(
            id="puzzle-test",
            seed=seed,
            difficulty="easy",
            rows=rows,
            cols=cols,
            cells=list(cells),
            regions=[
                Region(id=rid, cells=[Cell(r, c) for r, c in rcells], rule=Rule(rid, rtype, value))
                for rid, rcells, rtype, value in regions
            ],
            available_dominoes=[Domino(f"d{i}", a, b) for i, (a, b) in enumerate(dominoes)],
            placements=list(placements or []),
        )
    return _build


@pytest.fixture
def row_puzzle(build_puzzle):
    """1x4 strip, one region holding every cell, rule SUM_EQUALS 10."""
    return build_puzzle(
        1, 4,
        regions=[("r0", [(0, 0), (0, 1), (0, 2), (0, 3)], RuleType.SUM_EQUALS, 10)],
        dominoes=[(1, 3), (2, 4), (2, 3), (0, 0)],
    )
