"""
Puzzle generator

Pipeline per attempt:
1. Pick a shape template (seeded)
2. Greedy-match its cells into dominoes from a shuffled catalog
3. Build regions from the template rules
4. Structural validation (cover, bounds, rule values, complete matching)
5. Constraint validation of the matching against the region rules

A failed attempt marks its template and retries with a new working seed.
When the retries run out, one attempt is made on the fallback template;
if that fails too, a degraded puzzle is returned instead of raising.
"""

import uuid
from dataclasses import dataclass, replace
from typing import List, Dict, Optional, Tuple

from Solver.puzzle import Puzzle, Cell, Domino, Placement, Region, full_domino_set
from Solver.edges import edge_to_placement
from Solver.constraints import ConstraintChecker
from Solver.solver import BacktrackingSolver

from .rng import SeededRandom
from .templates import ShapeTemplate, TemplateCatalog, DIFFICULTIES
from .cache import SolutionCache


OK = "ok"
STRUCTURE_FAILED = "structure"
CONSTRAINTS_FAILED = "constraints"


# -----------------------------------------------------------------------------
# Configuration
# -----------------------------------------------------------------------------
@dataclass
class GeneratorConfig:
    max_retries: int = 10               # attempts after the first, before the fallback template
    failure_threshold: int = 3          # template skipped once it failed this many times
    max_exhaustion_resets: int = 2      # counter resets when every template is skipped
    cache_size: int = 1000
    solver_max_nodes: Optional[int] = 500_000
    verbose: bool = False


@dataclass
class AttemptResult:
    status: str
    template: ShapeTemplate
    puzzle: Optional[Puzzle] = None
    problems: Optional[List[str]] = None


# -----------------------------------------------------------------------------
# Matching and structure
# -----------------------------------------------------------------------------
def generate_greedy_matching(cells: List[Cell],
                             rng: SeededRandom) -> Tuple[List[Placement], List[Domino]]:
    """
    Walk `cells` in order and pair each uncovered cell with its right
    neighbour, else its bottom neighbour, taking the next domino from a
    seeded shuffle of the full set. No backtracking: a cell with no free
    partner stays uncovered and the matching comes back incomplete.
    """
    active = set(cells)
    covered = set()
    shuffled = rng.shuffle(full_domino_set())

    placements: List[Placement] = []
    used: List[Domino] = []

    for cell in cells:
        if cell in covered:
            continue

        right = Cell(cell.row, cell.col + 1)
        below = Cell(cell.row + 1, cell.col)
        if right in active and right not in covered:
            partner = right
        elif below in active and below not in covered:
            partner = below
        else:
            continue

        if len(used) >= len(shuffled):
            break

        domino = shuffled[len(used)]
        covered.add(cell)
        covered.add(partner)
        placements.append(edge_to_placement((cell, partner), domino.id))
        used.append(domino)

    return placements, used


def build_regions(template: ShapeTemplate) -> List[Region]:
    """One region per template rule, cells grouped by region id in template order."""
    regions = []
    for rule in template.rules:
        cells = [tc.cell for tc in template.cells if tc.region_id == rule.region_id]
        regions.append(Region(id=rule.region_id, cells=cells, rule=rule))
    return regions


def validate_structure(rows: int, cols: int, cells: List[Cell], regions: List[Region],
                       placements: List[Placement]) -> List[str]:
    """Returns a list of problems; empty means the layout is sound."""
    problems = []
    active = set(cells)

    if len(active) != len(cells):
        problems.append("Active cell listed more than once")
    if len(cells) % 2 != 0:
        problems.append(f"Odd number of active cells ({len(cells)})")

    owner: Dict[Cell, str] = {}
    for region in regions:
        if not region.cells:
            problems.append(f"Region {region.id} has no cells")
        for cell in region.cells:
            if not (0 <= cell.row < rows and 0 <= cell.col < cols):
                problems.append(f"Region {region.id} cell {cell!r} is out of bounds")
            elif cell not in active:
                problems.append(f"Region {region.id} cell {cell!r} is not an active cell")
            if cell in owner and owner[cell] != region.id:
                problems.append(f"Cell {cell!r} claimed by {owner[cell]} and {region.id}")
            owner.setdefault(cell, region.id)
        if region.rule is None:
            problems.append(f"Region {region.id} has no rule")
        elif region.rule.value < 0:
            problems.append(f"Region {region.id} rule value {region.rule.value} is negative")

    for cell in cells:
        if cell not in owner:
            problems.append(f"Active cell {cell!r} is not in any region")

    if len(placements) * 2 != len(cells):
        problems.append(f"Matching covers {len(placements) * 2} of {len(cells)} cells")

    return problems


# -----------------------------------------------------------------------------
# Generator
# -----------------------------------------------------------------------------
class PuzzleGenerator:
    """
    Owns the template failure counters and the solution cache, so two
    generators never share bookkeeping.
    """

    def __init__(self, config: Optional[GeneratorConfig] = None,
                 catalog: Optional[TemplateCatalog] = None,
                 cache: Optional[SolutionCache] = None):
        self.config = config or GeneratorConfig()
        self.catalog = catalog or TemplateCatalog(
            failure_threshold=self.config.failure_threshold,
            max_exhaustion_resets=self.config.max_exhaustion_resets,
            verbose=self.config.verbose,
        )
        self.cache = cache if cache is not None else SolutionCache(self.config.cache_size)
        self.verbose = self.config.verbose
        self.stats = {'attempts': 0, 'structure_failures': 0,
                      'constraint_failures': 0, 'fallbacks': 0, 'degraded': 0}

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------
    def generate(self, difficulty: str, seed: Optional[str] = None) -> Puzzle:
        """
        Build a puzzle whose `solution` satisfies every region rule.

        With an explicit seed the result is reproducible and `puzzle.seed`
        is always that seed. Without one, a random seed is drawn per
        attempt and the returned puzzle carries the seed that produced it.
        """
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {difficulty!r} (expected one of {DIFFICULTIES})")

        explicit = bool(seed)
        working_seed = seed if explicit else self._fresh_seed()
        last: Optional[AttemptResult] = None

        if self.verbose:
            print("=" * 60)
            print(f"GENERATING {difficulty.upper()} PUZZLE (seed={seed if explicit else 'random'})")
            print("=" * 60)

        for attempt in range(self.config.max_retries + 1):
            public_seed = seed if explicit else working_seed
            # Explicit seeds ignore failure counters so earlier calls cannot change the pick
            last = self._attempt(difficulty, public_seed, working_seed,
                                 honor_failures=not explicit)
            if last.status == OK:
                return self._finish(last.puzzle)

            self.catalog.mark_failed(last.template)
            if self.verbose:
                print(f"[generator] attempt {attempt + 1} on {last.template.id} failed: {last.status}")

            working_seed = f"{seed}-retry-{attempt + 1}" if explicit else self._fresh_seed()

        # Single deterministic attempt on the template known to work
        self.stats['fallbacks'] += 1
        suffix = "structure-fallback" if last.status == STRUCTURE_FAILED else "validation-fallback"
        base = seed if explicit else working_seed
        fallback_seed = f"{base}-{suffix}"
        public_seed = seed if explicit else fallback_seed
        if self.verbose:
            print(f"[generator] retries exhausted, trying {self.catalog.fallback.id}")

        result = self._attempt(difficulty, public_seed, fallback_seed,
                               template=self.catalog.fallback)
        if result.status == OK:
            return self._finish(result.puzzle)

        self.stats['degraded'] += 1
        if self.verbose:
            print(f"[generator] ✗ fallback failed ({result.status}), returning degraded puzzle")
        if result.status == STRUCTURE_FAILED:
            return self._empty_stub(difficulty, public_seed)
        return result.puzzle

    def solve_with_cache(self, puzzle: Puzzle) -> Optional[Puzzle]:
        """
        Solved copy of `puzzle`: its stored solution, then the seed cache,
        then a fresh search. Stored and cached answers are re-checked before
        use. None when no tiling satisfies the rules.
        """
        if puzzle.solution and ConstraintChecker.is_complete_solution(puzzle, puzzle.solution):
            return puzzle.with_placements(puzzle.solution)

        cached = self.cache.get(puzzle.seed) if puzzle.seed else None
        if cached and ConstraintChecker.is_complete_solution(puzzle, cached):
            if self.verbose:
                print(f"[generator] cache hit for seed {puzzle.seed}")
            return puzzle.with_placements(cached)

        solver = BacktrackingSolver(puzzle, verbose=self.verbose,
                                    max_nodes=self.config.solver_max_nodes)
        solved = solver.solve()
        if solved is None:
            template = self._template_for(puzzle)
            if template is not None and not solver.stats['budget_exhausted']:
                self.catalog.mark_failed(template)
            return None

        if puzzle.seed:
            self.cache.set(puzzle.seed, solved.placements)
        return solved

    def try_template(self, template: ShapeTemplate, seed: str) -> AttemptResult:
        """One attempt on a given template, no retries and no bookkeeping."""
        return self._attempt(template.difficulty, seed, seed, template=template)

    # -------------------------------------------------------------------------
    # Attempts
    # -------------------------------------------------------------------------
    def _attempt(self, difficulty: str, public_seed: str, working_seed: str,
                 template: Optional[ShapeTemplate] = None,
                 honor_failures: bool = True) -> AttemptResult:
        self.stats['attempts'] += 1
        rng = SeededRandom(working_seed)
        if template is None:
            template = self.catalog.get_random_template(difficulty, rng, honor_failures)

        cells = [tc.cell for tc in template.cells]
        placements, dominoes = generate_greedy_matching(cells, rng)
        regions = build_regions(template)

        problems = validate_structure(template.rows, template.cols, cells, regions, placements)
        if problems:
            self.stats['structure_failures'] += 1
            if self.verbose:
                for problem in problems:
                    print(f"  [structure] {problem}")
            return AttemptResult(STRUCTURE_FAILED, template, problems=problems)

        candidate = Puzzle(
            id=str(uuid.uuid4()),
            seed=public_seed,
            difficulty=difficulty,
            rows=template.rows,
            cols=template.cols,
            cells=cells,
            regions=regions,
            available_dominoes=dominoes,
            placements=placements,
            template_id=template.id,
        )

        result = ConstraintChecker.validate_puzzle(candidate)
        if not result.is_valid:
            self.stats['constraint_failures'] += 1
            if self.verbose:
                print(f"  [constraints] {result.message} {result.invalid_regions}")
            return AttemptResult(CONSTRAINTS_FAILED, template,
                                 puzzle=replace(candidate, placements=[], solution=None))

        return AttemptResult(OK, template,
                             puzzle=replace(candidate, placements=[], solution=list(placements)))

    def _finish(self, puzzle: Puzzle) -> Puzzle:
        self.cache.set(puzzle.seed, puzzle.solution)
        if self.verbose:
            print(f"[generator] ✓ {puzzle}")
        return puzzle

    def _empty_stub(self, difficulty: str, seed: str) -> Puzzle:
        return Puzzle(
            id=str(uuid.uuid4()),
            seed=seed,
            difficulty=difficulty,
            rows=0,
            cols=0,
            cells=[],
            regions=[],
            available_dominoes=[],
        )

    def _template_for(self, puzzle: Puzzle) -> Optional[ShapeTemplate]:
        if not puzzle.template_id:
            return None
        if puzzle.template_id == self.catalog.fallback.id:
            return self.catalog.fallback
        for template in self.catalog.templates_for(puzzle.difficulty):
            if template.id == puzzle.template_id:
                return template
        return None

    @staticmethod
    def _fresh_seed() -> str:
        return uuid.uuid4().hex

    def print_stats(self) -> None:
        print("\nGenerator Statistics:")
        print(f"  Attempts: {self.stats['attempts']}")
        print(f"  Structural failures: {self.stats['structure_failures']}")
        print(f"  Constraint failures: {self.stats['constraint_failures']}")
        print(f"  Fallback attempts: {self.stats['fallbacks']}")
        print(f"  Degraded results: {self.stats['degraded']}")
        print(f"  Cached solutions: {self.cache.size()}")


# -----------------------------------------------------------------------------
# Module-level convenience
# -----------------------------------------------------------------------------
_default_generator: Optional[PuzzleGenerator] = None


def default_generator() -> PuzzleGenerator:
    global _default_generator
    if _default_generator is None:
        _default_generator = PuzzleGenerator()
    return _default_generator


def generate_puzzle(difficulty: str, seed: Optional[str] = None) -> Puzzle:
    return default_generator().generate(difficulty, seed)


def solve_with_cache(puzzle: Puzzle) -> Optional[Puzzle]:
    return default_generator().solve_with_cache(puzzle)


def solution_cache() -> SolutionCache:
    return default_generator().cache
