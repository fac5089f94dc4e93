"""
Cell/edge algebra for domino tilings.

An edge is a pair of grid-adjacent cells; a tiling is a list of edges that
covers a cell set exactly once. Placements and edges describe the same thing
and convert both ways.
"""
from typing import List, Dict, Set, Tuple, Iterator, Iterable, Optional

from .puzzle import Cell, Placement, EdgeError, HORIZONTAL, VERTICAL


Edge = Tuple[Cell, Cell]


# -----------------------------------------------------------------------------
# Cells
# -----------------------------------------------------------------------------
def adjacent_cells(cell: Cell) -> List[Cell]:
    """Up, down, left, right. Some of these may not exist on the board."""
    return [
        Cell(cell.row - 1, cell.col),
        Cell(cell.row + 1, cell.col),
        Cell(cell.row, cell.col - 1),
        Cell(cell.row, cell.col + 1),
    ]


def are_adjacent(cell1: Cell, cell2: Cell) -> bool:
    row_diff = abs(cell1.row - cell2.row)
    col_diff = abs(cell1.col - cell2.col)
    return (row_diff == 1 and col_diff == 0) or (row_diff == 0 and col_diff == 1)


def cell_key(cell: Cell) -> str:
    return f"{cell.row}-{cell.col}"


# -----------------------------------------------------------------------------
# Edges
# -----------------------------------------------------------------------------
def reverse_edge(edge: Edge) -> Edge:
    return (edge[1], edge[0])


def normalize_edge(edge: Edge) -> Edge:
    """Smaller cell (by row, then col) first."""
    cell1, cell2 = edge
    if cell1 <= cell2:
        return edge
    return reverse_edge(edge)


def edge_key(edge: Edge) -> str:
    cell1, cell2 = normalize_edge(edge)
    return f"{cell_key(cell1)}:{cell_key(cell2)}"


def edges_equal(edge1: Edge, edge2: Edge) -> bool:
    return normalize_edge(edge1) == normalize_edge(edge2)


def placement_to_edge(placement: Placement) -> Edge:
    cells = placement.cells()
    if len(cells) != 2:
        raise EdgeError(f"Placement must cover exactly 2 cells, got {len(cells)} "
                        f"(orientation={placement.orientation!r})")
    cell1, cell2 = cells
    if not are_adjacent(cell1, cell2):
        raise EdgeError(f"Cells in placement are not adjacent: {cell_key(cell1)} and {cell_key(cell2)}")
    return (cell1, cell2)


def edge_to_placement(edge: Edge, domino_id: str) -> Placement:
    cell1, cell2 = edge
    if not are_adjacent(cell1, cell2):
        raise EdgeError(f"Cells in edge are not adjacent: {cell_key(cell1)} and {cell_key(cell2)}")

    orientation = HORIZONTAL if cell1.row == cell2.row else VERTICAL
    anchor = min(cell1, cell2)
    return Placement(
        domino_id=domino_id,
        row=anchor.row,
        col=anchor.col,
        orientation=orientation,
        fixed=False,
    )


def placements_to_edges(placements: Iterable[Placement]) -> List[Edge]:
    return [placement_to_edge(p) for p in placements]


def edges_to_placements(mappings: Iterable[Tuple[Edge, str]]) -> List[Placement]:
    """Convert (edge, domino_id) pairs to placements."""
    return [edge_to_placement(edge, domino_id) for edge, domino_id in mappings]


# -----------------------------------------------------------------------------
# Tilings
# -----------------------------------------------------------------------------
def is_valid_tiling(cells: Iterable[Cell], edges: Iterable[Edge]) -> bool:
    """True when the edges cover every cell exactly once and nothing else."""
    cell_set = set(cells)
    covered: Set[Cell] = set()

    for cell1, cell2 in edges:
        if cell1 not in cell_set or cell2 not in cell_set:
            return False
        if not are_adjacent(cell1, cell2):
            return False
        if cell1 in covered or cell2 in covered:
            return False
        covered.add(cell1)
        covered.add(cell2)

    return covered == cell_set


def iter_tilings(cells: List[Cell]) -> Iterator[List[Edge]]:
    """
    Lazily yield every domino tiling of `cells`.

    The first uncovered cell (in list order) is always paired next, so each
    tiling is produced exactly once. Yields nothing for an odd cell count.
    """
    if len(cells) % 2 != 0:
        return

    cell_set = set(cells)
    covered: Set[Cell] = set()
    current: List[Edge] = []

    def backtrack() -> Iterator[List[Edge]]:
        first = next((c for c in cells if c not in covered), None)
        if first is None:
            yield list(current)
            return

        for neighbor in adjacent_cells(first):
            if neighbor not in cell_set or neighbor in covered:
                continue
            current.append(normalize_edge((first, neighbor)))
            covered.add(first)
            covered.add(neighbor)

            yield from backtrack()

            current.pop()
            covered.discard(first)
            covered.discard(neighbor)

    yield from backtrack()


def tiling_covers_cell(tiling: Iterable[Edge], cell: Cell) -> bool:
    return edge_covering_cell(tiling, cell) is not None


def edge_covering_cell(tiling: Iterable[Edge], cell: Cell) -> Optional[Edge]:
    for edge in tiling:
        if cell in edge:
            return edge
    return None


def coverage_map(placements: Iterable[Placement]) -> Dict[Cell, Placement]:
    """Map each covered cell to the placement covering it."""
    index: Dict[Cell, Placement] = {}
    for placement in placements:
        for cell in placement.cells():
            index[cell] = placement
    return index
