import pytest

from Solver.puzzle import Cell, Placement, EdgeError, HORIZONTAL, VERTICAL
from Solver.edges import (adjacent_cells, are_adjacent, normalize_edge, reverse_edge, edge_key,
                          edges_equal, placement_to_edge, edge_to_placement, placements_to_edges,
                          edges_to_placements, is_valid_tiling, iter_tilings, tiling_covers_cell,
                          edge_covering_cell, coverage_map)

from conftest import grid_cells


def _adjacent_pairs(rows, cols):
    cells = grid_cells(rows, cols)
    return [(a, b) for a in cells for b in cells if are_adjacent(a, b)]


def test_adjacent_cells_are_the_four_neighbours():
    assert adjacent_cells(Cell(1, 1)) == [Cell(0, 1), Cell(2, 1), Cell(1, 0), Cell(1, 2)]


def test_are_adjacent():
    assert are_adjacent(Cell(0, 0), Cell(0, 1))
    assert are_adjacent(Cell(1, 0), Cell(0, 0))
    assert not are_adjacent(Cell(0, 0), Cell(1, 1))
    assert not are_adjacent(Cell(0, 0), Cell(0, 0))
    assert not are_adjacent(Cell(0, 0), Cell(0, 2))


def test_edge_placement_edge_round_trip_for_every_adjacent_pair():
    for a, b in _adjacent_pairs(3, 3):
        placement = edge_to_placement((a, b), "d0")
        assert placement.anchor == min(a, b)
        assert edges_equal(placement_to_edge(placement), (a, b))
        assert edge_to_placement(placement_to_edge(placement), "d0") == placement


def test_edge_to_placement_orientation():
    assert edge_to_placement((Cell(2, 3), Cell(2, 2)), "d").orientation == HORIZONTAL
    assert edge_to_placement((Cell(3, 1), Cell(2, 1)), "d").orientation == VERTICAL


def test_non_adjacent_edge_raises():
    with pytest.raises(EdgeError):
        edge_to_placement((Cell(0, 0), Cell(1, 1)), "d0")
    with pytest.raises(EdgeError):
        edge_to_placement((Cell(0, 0), Cell(0, 2)), "d0")


def test_malformed_placement_raises():
    with pytest.raises(EdgeError):
        placement_to_edge(Placement("d0", 0, 0, "diagonal"))


def test_normalize_and_keys():
    edge = (Cell(1, 2), Cell(1, 1))
    assert normalize_edge(edge) == (Cell(1, 1), Cell(1, 2))
    assert reverse_edge(edge) == (Cell(1, 1), Cell(1, 2))
    assert edge_key(edge) == edge_key(reverse_edge(edge)) == "1-1:1-2"


def test_bulk_conversions():
    placements = [Placement("d0", 0, 0, HORIZONTAL), Placement("d1", 1, 0, HORIZONTAL)]
    edges = placements_to_edges(placements)
    assert edges == [(Cell(0, 0), Cell(0, 1)), (Cell(1, 0), Cell(1, 1))]
    assert edges_to_placements(zip(edges, ["d0", "d1"])) == placements


def test_is_valid_tiling():
    cells = grid_cells(2, 2)
    assert is_valid_tiling(cells, [(Cell(0, 0), Cell(0, 1)), (Cell(1, 0), Cell(1, 1))])
    # missing a cell
    assert not is_valid_tiling(cells, [(Cell(0, 0), Cell(0, 1))])
    # overlap
    assert not is_valid_tiling(cells, [(Cell(0, 0), Cell(0, 1)), (Cell(0, 1), Cell(1, 1))])
    # outside the cell set
    assert not is_valid_tiling(cells, [(Cell(0, 0), Cell(0, 1)), (Cell(1, 1), Cell(1, 2))])


def test_iter_tilings_counts():
    assert len(list(iter_tilings(grid_cells(2, 2)))) == 2
    assert len(list(iter_tilings(grid_cells(2, 3)))) == 3
    assert len(list(iter_tilings(grid_cells(2, 4)))) == 5
    assert list(iter_tilings(grid_cells(1, 3))) == []


def test_iter_tilings_yields_valid_tilings():
    cells = grid_cells(3, 4)
    tilings = list(iter_tilings(cells))
    assert len(tilings) == 11
    assert all(is_valid_tiling(cells, t) for t in tilings)


def test_iter_tilings_is_lazy():
    gen = iter_tilings(grid_cells(4, 4))
    first = next(gen)
    assert len(first) == 8


def test_covering_lookups():
    tiling = [(Cell(0, 0), Cell(0, 1))]
    assert tiling_covers_cell(tiling, Cell(0, 1))
    assert not tiling_covers_cell(tiling, Cell(1, 1))
    assert edge_covering_cell(tiling, Cell(0, 0)) == tiling[0]

    placement = Placement("d0", 0, 0, VERTICAL)
    index = coverage_map([placement])
    assert index == {Cell(0, 0): placement, Cell(1, 0): placement}
