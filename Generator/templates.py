"""
Shape template catalog and seeded template selection.

Templates are static input data (data/templates.json). The only state kept
here is failure bookkeeping: how often puzzles built from a template were
rejected, keyed by a hash of the template's cells and rules.
"""
import json
import hashlib
from pathlib import Path
from typing import List, Dict, Optional
from dataclasses import dataclass, field

from Solver.puzzle import Cell, Rule, RuleType

from .rng import SeededRandom


DIFFICULTIES = ("easy", "medium", "hard")
CATALOG_PATH = Path(__file__).parent / "data" / "templates.json"


@dataclass(frozen=True)
class TemplateCell:
    row: int
    col: int
    region_id: str

    @property
    def cell(self) -> Cell:
        return Cell(self.row, self.col)


@dataclass
class ShapeTemplate:
    """Authored blueprint: bounding box, active cells tagged by region, one rule per region."""
    id: str
    difficulty: str
    rows: int
    cols: int
    cells: List[TemplateCell]
    rules: List[Rule]
    name: Optional[str] = None

    @property
    def cell_count(self) -> int:
        return len(self.cells)

    @property
    def region_count(self) -> int:
        return len({c.region_id for c in self.cells})

    def is_tileable(self) -> bool:
        """Necessary condition only: an even number of cells."""
        return self.cell_count % 2 == 0

    def content_hash(self) -> str:
        payload = {
            'cells': sorted([c.row, c.col, c.region_id] for c in self.cells),
            'rules': sorted([r.region_id, str(r.type.value if isinstance(r.type, RuleType) else r.type), r.value]
                            for r in self.rules),
        }
        return hashlib.sha1(json.dumps(payload, sort_keys=True).encode("utf-8")).hexdigest()

    @staticmethod
    def from_dict(data: Dict, difficulty: str) -> "ShapeTemplate":
        return ShapeTemplate(
            id=data['id'],
            name=data.get('name'),
            difficulty=difficulty,
            rows=data['rows'],
            cols=data['cols'],
            cells=[TemplateCell(c['row'], c['col'], c['region_id']) for c in data['cells']],
            rules=[Rule.from_dict(r) for r in data['rules']],
        )


def _quadrant(row: int, col: int) -> str:
    return f"region-{(row // 2) * 2 + (col // 2)}"


# 4x4, four 2x2 quadrants. Greedy row-major pairing always tiles it with two
# dominoes anchored per quadrant, and any two distinct dominoes sum to 1..23.
FALLBACK_TEMPLATE = ShapeTemplate(
    id="fallback-4x4",
    name="Fallback 4x4",
    difficulty="easy",
    rows=4,
    cols=4,
    cells=[TemplateCell(r, c, _quadrant(r, c)) for r in range(4) for c in range(4)],
    rules=[
        Rule("region-0", RuleType.SUM_AT_LEAST, 1),
        Rule("region-1", RuleType.SUM_AT_MOST, 23),
        Rule("region-2", RuleType.SUM_AT_LEAST, 1),
        Rule("region-3", RuleType.SUM_AT_MOST, 23),
    ],
)


# -----------------------------------------------------------------------------
# Catalog loading
# -----------------------------------------------------------------------------
def load_catalog(json_path=CATALOG_PATH) -> Dict[str, List[ShapeTemplate]]:
    """Load templates from JSON file, keyed by difficulty"""
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return {
        difficulty: [ShapeTemplate.from_dict(t, difficulty) for t in data.get(difficulty, [])]
        for difficulty in DIFFICULTIES
    }


_DEFAULT_CATALOG: Optional[Dict[str, List[ShapeTemplate]]] = None


def default_catalog() -> Dict[str, List[ShapeTemplate]]:
    global _DEFAULT_CATALOG
    if _DEFAULT_CATALOG is None:
        _DEFAULT_CATALOG = load_catalog()
    return _DEFAULT_CATALOG


def templates_for_difficulty(difficulty: str) -> List[ShapeTemplate]:
    if difficulty not in DIFFICULTIES:
        raise ValueError(f"Unknown difficulty: {difficulty!r} (expected one of {DIFFICULTIES})")
    return list(default_catalog()[difficulty])


def template_by_id(template_id: str) -> Optional[ShapeTemplate]:
    if template_id == FALLBACK_TEMPLATE.id:
        return FALLBACK_TEMPLATE
    for templates in default_catalog().values():
        for template in templates:
            if template.id == template_id:
                return template
    return None


def template_metadata(difficulty: str) -> List[Dict]:
    return [
        {'id': t.id, 'name': t.name, 'cell_count': t.cell_count, 'region_count': t.region_count}
        for t in templates_for_difficulty(difficulty)
    ]


# -----------------------------------------------------------------------------
# Failure bookkeeping
# -----------------------------------------------------------------------------
class TemplateFailureTracker:
    """
    Per-template failure counts keyed by content hash.

    Best effort: methods return nothing and never raise, and a lost update
    only means a template gets tried once more than needed.
    """

    def __init__(self):
        self.counts: Dict[str, int] = {}

    def mark_failed(self, template: ShapeTemplate) -> None:
        key = template.content_hash()
        self.counts[key] = self.counts.get(key, 0) + 1

    def failure_count(self, template: ShapeTemplate) -> int:
        return self.counts.get(template.content_hash(), 0)

    def reset(self) -> None:
        self.counts = {}


class TemplateCatalog:
    """Seeded template selection that skips untileable and repeatedly failing templates."""

    def __init__(self, templates: Optional[Dict[str, List[ShapeTemplate]]] = None,
                 failure_threshold: int = 3, max_exhaustion_resets: int = 2,
                 fallback: ShapeTemplate = FALLBACK_TEMPLATE, verbose: bool = False):
        self.templates = templates
        self.failure_threshold = failure_threshold
        self.max_exhaustion_resets = max_exhaustion_resets
        self.fallback = fallback
        self.failures = TemplateFailureTracker()
        self.verbose = verbose

    def templates_for(self, difficulty: str) -> List[ShapeTemplate]:
        if self.templates is None:
            return templates_for_difficulty(difficulty)
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {difficulty!r} (expected one of {DIFFICULTIES})")
        return list(self.templates.get(difficulty, []))

    def eligible(self, difficulty: str, honor_failures: bool = True) -> List[ShapeTemplate]:
        out = []
        for template in self.templates_for(difficulty):
            if not template.is_tileable():
                continue
            if honor_failures and self.failures.failure_count(template) >= self.failure_threshold:
                continue
            out.append(template)
        return out

    def mark_failed(self, template: ShapeTemplate) -> None:
        self.failures.mark_failed(template)

    def get_random_template(self, difficulty: str, rng: SeededRandom,
                            honor_failures: bool = True) -> ShapeTemplate:
        """
        Uniform seeded pick among eligible templates. When nothing is
        eligible, clear the failure counters and look again (bounded);
        after that, return the fallback template.
        """
        for attempt in range(self.max_exhaustion_resets + 1):
            candidates = self.eligible(difficulty, honor_failures)
            if candidates:
                template = candidates[rng.randint(0, len(candidates) - 1)]
                if self.verbose:
                    print(f"[templates] {difficulty}: picked {template.id} "
                          f"from {len(candidates)} candidate(s)")
                return template

            if attempt < self.max_exhaustion_resets:
                if self.verbose:
                    print(f"[templates] {difficulty}: no eligible templates, resetting failure counters")
                self.failures.reset()

        if self.verbose:
            print(f"[templates] {difficulty}: exhausted, using {self.fallback.id}")
        return self.fallback
