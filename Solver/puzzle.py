"""
Core data structures for Pips puzzle representation on sparse grids
"""
import json
import time
import uuid
from enum import Enum
from typing import List, Dict, Set, Tuple, Optional, Iterable
from dataclasses import dataclass, field, replace


HORIZONTAL = "horizontal"
VERTICAL = "vertical"

MAX_PIPS = 6


class EdgeError(ValueError):
    """Raised when two cells cannot form a domino edge."""


@dataclass(frozen=True, order=True)
class Cell:
    """A grid coordinate. Ordering is lexicographic (row, then col)."""
    row: int
    col: int

    def __repr__(self):
        return f"({self.row},{self.col})"


@dataclass(frozen=True)
class Domino:
    """Represents a domino piece"""
    id: str
    left: int
    right: int

    def as_tuple(self) -> Tuple[int, int]:
        """Return domino as (left, right) tuple"""
        return (self.left, self.right)

    def sum(self) -> int:
        """Total pips on this domino"""
        return self.left + self.right

    def is_double(self) -> bool:
        """Check if both sides have equal pips"""
        return self.left == self.right

    def matches(self, other: "Domino") -> bool:
        """Same pip pair, in either order"""
        return sorted(self.as_tuple()) == sorted(other.as_tuple())

    def __repr__(self):
        return f"Domino({self.left},{self.right})"


def full_domino_set() -> List[Domino]:
    """All 28 double-six dominoes with left <= right, in catalog order."""
    dominoes = []
    next_id = 0
    for left in range(MAX_PIPS + 1):
        for right in range(left, MAX_PIPS + 1):
            dominoes.append(Domino(id=f"domino-{next_id}", left=left, right=right))
            next_id += 1
    return dominoes


@dataclass(frozen=True)
class Placement:
    """
    A domino laid on the grid. (row, col) is the anchor cell, the
    lexicographically smaller of the two covered cells.
    """
    domino_id: str
    row: int
    col: int
    orientation: str = HORIZONTAL
    fixed: bool = False  # reserved for hints, always False for now
    id: str = field(default="", compare=False)

    def __post_init__(self):
        if not self.id:
            object.__setattr__(self, "id", f"{self.domino_id}-{self.row}-{self.col}")

    @property
    def anchor(self) -> Cell:
        return Cell(self.row, self.col)

    def cells(self) -> List[Cell]:
        """Cells covered by this placement (two, unless orientation is malformed)"""
        cells = [self.anchor]
        if self.orientation == HORIZONTAL:
            cells.append(Cell(self.row, self.col + 1))
        elif self.orientation == VERTICAL:
            cells.append(Cell(self.row + 1, self.col))
        return cells

    def rotated(self) -> "Placement":
        other = VERTICAL if self.orientation == HORIZONTAL else HORIZONTAL
        return replace(self, orientation=other)

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'domino_id': self.domino_id,
            'row': self.row,
            'col': self.col,
            'orientation': self.orientation,
            'fixed': self.fixed,
        }

    @staticmethod
    def from_dict(data: Dict) -> "Placement":
        return Placement(
            domino_id=data['domino_id'],
            row=data['row'],
            col=data['col'],
            orientation=data.get('orientation', HORIZONTAL),
            fixed=data.get('fixed', False),
            id=data.get('id', ""),
        )


class RuleType(str, Enum):
    SUM_AT_LEAST = "SUM_AT_LEAST"
    SUM_AT_MOST = "SUM_AT_MOST"
    SUM_EQUALS = "SUM_EQUALS"
    SUM_LESS_THAN = "SUM_LESS_THAN"
    SUM_GREATER_THAN = "SUM_GREATER_THAN"
    VALUES_EQUAL = "VALUES_EQUAL"
    VALUES_ALL_DIFFERENT = "VALUES_ALL_DIFFERENT"


SUM_RULES = frozenset({
    RuleType.SUM_AT_LEAST,
    RuleType.SUM_AT_MOST,
    RuleType.SUM_EQUALS,
    RuleType.SUM_LESS_THAN,
    RuleType.SUM_GREATER_THAN,
})
VALUE_RULES = frozenset({RuleType.VALUES_EQUAL, RuleType.VALUES_ALL_DIFFERENT})


@dataclass(frozen=True)
class Rule:
    """Constraint attached to one region. `value` is ignored by value rules."""
    region_id: str
    type: RuleType
    value: int = 0

    def label(self) -> str:
        """Badge text for the rule"""
        labels = {
            RuleType.SUM_AT_LEAST: f"≥{self.value}",
            RuleType.SUM_AT_MOST: f"≤{self.value}",
            RuleType.SUM_EQUALS: f"{self.value}",
            RuleType.SUM_LESS_THAN: f"<{self.value}",
            RuleType.SUM_GREATER_THAN: f">{self.value}",
            RuleType.VALUES_EQUAL: "=",
            RuleType.VALUES_ALL_DIFFERENT: "≠",
        }
        return labels.get(self.type, f"{self.value}")

    def to_dict(self) -> Dict:
        rule_type = self.type.value if isinstance(self.type, RuleType) else str(self.type)
        return {'region_id': self.region_id, 'type': rule_type, 'value': self.value}

    @staticmethod
    def from_dict(data: Dict) -> "Rule":
        try:
            rule_type = RuleType(data['type'])
        except ValueError:
            raise RuntimeError(f"[puzzle] Unknown rule type: {data['type']!r}")
        return Rule(region_id=data['region_id'], type=rule_type, value=data.get('value', 0))


@dataclass
class Region:
    """Represents a region with a constraint"""
    id: str
    cells: List[Cell] = field(default_factory=list)
    rule: Optional[Rule] = None

    def __repr__(self):
        label = self.rule.label() if self.rule else "?"
        return f"Region(id={self.id}, size={len(self.cells)}, rule={label})"


@dataclass
class ValidationResult:
    is_valid: bool
    invalid_regions: List[str]
    message: str


@dataclass
class PlacementCheck:
    is_valid: bool
    error: Optional[str] = None


@dataclass
class Puzzle:
    """
    Aggregate root. Treated as a value: play operations return a new
    Puzzle via dataclasses.replace instead of mutating this one.
    """
    id: str
    seed: str
    difficulty: str
    rows: int
    cols: int
    cells: List[Cell]
    regions: List[Region]
    available_dominoes: List[Domino]
    placements: List[Placement] = field(default_factory=list)
    solution: Optional[List[Placement]] = None
    template_id: Optional[str] = None
    created_at: float = field(default_factory=time.time)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------
    def cell_set(self) -> Set[Cell]:
        return set(self.cells)

    def in_bounds(self, cell: Cell) -> bool:
        return 0 <= cell.row < self.rows and 0 <= cell.col < self.cols

    def domino_by_id(self, domino_id: str) -> Optional[Domino]:
        for domino in self.available_dominoes:
            if domino.id == domino_id:
                return domino
        return None

    def region_by_id(self, region_id: str) -> Optional[Region]:
        for region in self.regions:
            if region.id == region_id:
                return region
        return None

    def region_for_cell(self, cell: Cell) -> Optional[Region]:
        for region in self.regions:
            if cell in region.cells:
                return region
        return None

    def with_placements(self, placements: Iterable[Placement]) -> "Puzzle":
        return replace(self, placements=list(placements))

    # -------------------------------------------------------------------------
    # Serialisation
    # -------------------------------------------------------------------------
    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'seed': self.seed,
            'difficulty': self.difficulty,
            'rows': self.rows,
            'cols': self.cols,
            'cells': [{'row': c.row, 'col': c.col} for c in self.cells],
            'regions': [
                {
                    'id': r.id,
                    'cells': [{'row': c.row, 'col': c.col} for c in r.cells],
                    'rule': r.rule.to_dict() if r.rule else None,
                }
                for r in self.regions
            ],
            'available_dominoes': [
                {'id': d.id, 'left': d.left, 'right': d.right} for d in self.available_dominoes
            ],
            'placements': [p.to_dict() for p in self.placements],
            'solution': [p.to_dict() for p in self.solution] if self.solution is not None else None,
            'template_id': self.template_id,
            'created_at': self.created_at,
        }

    @staticmethod
    def from_dict(data: Dict) -> "Puzzle":
        cells = [Cell(c['row'], c['col']) for c in data['cells']]
        regions = []
        for r in data.get('regions', []):
            rule = Rule.from_dict(r['rule']) if r.get('rule') else None
            regions.append(Region(
                id=r['id'],
                cells=[Cell(c['row'], c['col']) for c in r['cells']],
                rule=rule,
            ))
        dominoes = [Domino(id=d['id'], left=d['left'], right=d['right'])
                    for d in data.get('available_dominoes', [])]

        # integrity checks, loud
        ids = [d.id for d in dominoes]
        if len(ids) != len(set(ids)):
            raise RuntimeError(f"[puzzle] Duplicate domino ids: {sorted(ids)}")
        bad_pips = [d for d in dominoes if not (0 <= d.left <= MAX_PIPS and 0 <= d.right <= MAX_PIPS)]
        if bad_pips:
            raise RuntimeError(f"[puzzle] Dominoes outside double-six range: {bad_pips}")

        solution = data.get('solution')
        return Puzzle(
            id=data.get('id') or str(uuid.uuid4()),
            seed=data.get('seed', ""),
            difficulty=data.get('difficulty', "easy"),
            rows=data['rows'],
            cols=data['cols'],
            cells=cells,
            regions=regions,
            available_dominoes=dominoes,
            placements=[Placement.from_dict(p) for p in data.get('placements', [])],
            solution=[Placement.from_dict(p) for p in solution] if solution is not None else None,
            template_id=data.get('template_id'),
            created_at=data.get('created_at', time.time()),
        )

    def __repr__(self):
        return (f"Puzzle(seed={self.seed!r}, difficulty={self.difficulty}, "
                f"grid={self.rows}x{self.cols}, cells={len(self.cells)}, "
                f"regions={len(self.regions)}, dominoes={len(self.available_dominoes)})")


def load_puzzle(json_path: str) -> Puzzle:
    """Load puzzle from JSON file"""
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return Puzzle.from_dict(data)


def save_puzzle(puzzle: Puzzle, json_path: str) -> None:
    with open(json_path, 'w', encoding='utf-8') as f:
        json.dump(puzzle.to_dict(), f, indent=2, ensure_ascii=False)
