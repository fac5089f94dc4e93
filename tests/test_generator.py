import pytest

from Solver.puzzle import Cell, Placement, Region, Rule, RuleType, full_domino_set
from Solver.constraints import ConstraintChecker, validate_puzzle
from Generator.rng import SeededRandom
from Generator.cache import SolutionCache
from Generator.templates import ShapeTemplate, TemplateCell, TemplateCatalog, FALLBACK_TEMPLATE, DIFFICULTIES
from Generator.generator import (GeneratorConfig, PuzzleGenerator, generate_greedy_matching, build_regions,
                                 validate_structure, generate_puzzle, OK, STRUCTURE_FAILED,
                                 CONSTRAINTS_FAILED)

from conftest import grid_cells


def _square_template(template_id, rules, region_id="r0"):
    return ShapeTemplate(
        id=template_id,
        difficulty="easy",
        rows=2,
        cols=2,
        cells=[TemplateCell(r, c, region_id) for r in range(2) for c in range(2)],
        rules=rules,
    )


IMPOSSIBLE = _square_template("impossible", [Rule("r0", RuleType.SUM_EQUALS, 1000)])
# cells tagged r0, but the only rule is for r1
BROKEN = _square_template("broken", [Rule("r1", RuleType.SUM_AT_LEAST, 0)])


def _signature(puzzle):
    return (puzzle.template_id, puzzle.cells, puzzle.regions,
            [r.rule.value for r in puzzle.regions])


# -----------------------------------------------------------------------------
# Greedy matching and structure
# -----------------------------------------------------------------------------
def test_greedy_matching_tiles_rectangle():
    placements, dominoes = generate_greedy_matching(grid_cells(2, 4), SeededRandom("m"))
    assert len(placements) == 4
    assert [p.domino_id for p in placements] == [d.id for d in dominoes]
    assert len({d.id for d in dominoes}) == 4
    assert all(d in full_domino_set() for d in dominoes)
    # right neighbour preferred
    assert placements[0].cells() == [Cell(0, 0), Cell(0, 1)]


def test_greedy_matching_falls_back_to_bottom_neighbour():
    cells = [Cell(0, 0), Cell(1, 0)]
    placements, _ = generate_greedy_matching(cells, SeededRandom("m"))
    assert placements[0].cells() == [Cell(0, 0), Cell(1, 0)]


def test_greedy_matching_can_leave_cells_uncovered():
    # tileable as (0,0)-(1,0) + (0,1)-(0,2), but greedy takes (0,0)-(0,1) first
    cells = [Cell(0, 0), Cell(0, 1), Cell(0, 2), Cell(1, 0)]
    placements, dominoes = generate_greedy_matching(cells, SeededRandom("m"))
    assert len(placements) == 1
    assert len(dominoes) == 1
    assert validate_structure(2, 3, cells, [Region("r", cells, Rule("r", RuleType.SUM_AT_LEAST, 0))],
                              placements) == ["Matching covers 2 of 4 cells"]


def test_greedy_matching_is_seeded():
    cells = grid_cells(4, 4)
    a, _ = generate_greedy_matching(cells, SeededRandom("same"))
    b, _ = generate_greedy_matching(cells, SeededRandom("same"))
    c, _ = generate_greedy_matching(cells, SeededRandom("other"))
    assert a == b
    assert [p.domino_id for p in a] != [p.domino_id for p in c]


def test_build_regions_groups_cells_by_rule():
    regions = build_regions(FALLBACK_TEMPLATE)
    assert [r.id for r in regions] == ["region-0", "region-1", "region-2", "region-3"]
    assert regions[0].cells == [Cell(0, 0), Cell(0, 1), Cell(1, 0), Cell(1, 1)]
    assert regions[1].rule == Rule("region-1", RuleType.SUM_AT_MOST, 23)


def test_validate_structure_accepts_fallback():
    cells = [tc.cell for tc in FALLBACK_TEMPLATE.cells]
    placements, _ = generate_greedy_matching(cells, SeededRandom("x"))
    assert validate_structure(4, 4, cells, build_regions(FALLBACK_TEMPLATE), placements) == []


def test_validate_structure_reports_problems():
    cells = [Cell(0, 0), Cell(0, 1), Cell(1, 0)]
    regions = [
        Region("a", [Cell(0, 0), Cell(0, 1)], Rule("a", RuleType.SUM_AT_LEAST, -1)),
        Region("b", [Cell(0, 1), Cell(5, 5)], Rule("b", RuleType.SUM_AT_MOST, 3)),
    ]
    problems = validate_structure(2, 2, cells, regions, [Placement("d0", 0, 0)])
    text = "\n".join(problems)
    assert "Odd number of active cells" in text
    assert "negative" in text
    assert "claimed by a and b" in text
    assert "out of bounds" in text
    assert "(1,0) is not in any region" in text
    assert "Matching covers 2 of 3 cells" in text


def test_validate_structure_inactive_region_cell():
    cells = [Cell(0, 0), Cell(0, 1)]
    regions = [Region("a", [Cell(0, 0), Cell(0, 1), Cell(1, 1)], Rule("a", RuleType.SUM_AT_LEAST, 0))]
    problems = validate_structure(2, 2, cells, regions, [Placement("d0", 0, 0)])
    assert problems == ["Region a cell (1,1) is not an active cell"]


def test_try_template_outcomes():
    generator = PuzzleGenerator()
    assert generator.try_template(FALLBACK_TEMPLATE, "s").status == OK
    assert generator.try_template(IMPOSSIBLE, "s").status == CONSTRAINTS_FAILED
    broken = generator.try_template(BROKEN, "s")
    assert broken.status == STRUCTURE_FAILED
    assert broken.problems


# -----------------------------------------------------------------------------
# Generation
# -----------------------------------------------------------------------------
def test_seed_abc_easy_scenario():
    puzzle = PuzzleGenerator().generate("easy", "abc")
    n = len(puzzle.cells)
    assert puzzle.seed == "abc"
    assert n % 2 == 0
    assert len(puzzle.regions) >= 1
    assert len(puzzle.available_dominoes) == n // 2
    assert puzzle.placements == []
    assert len(puzzle.solution) == n // 2


def test_generation_is_deterministic_for_explicit_seed():
    for difficulty in DIFFICULTIES:
        for seed in ("abc", "daily-1", "x"):
            first = PuzzleGenerator().generate(difficulty, seed)
            second = PuzzleGenerator().generate(difficulty, seed)
            assert _signature(first) == _signature(second)
            assert first.solution == second.solution


def test_failure_counters_do_not_change_seeded_output():
    fresh = PuzzleGenerator().generate("medium", "abc")

    used = PuzzleGenerator()
    for template in used.catalog.templates_for("medium"):
        for _ in range(10):
            used.catalog.mark_failed(template)
    assert _signature(used.generate("medium", "abc")) == _signature(fresh)


@pytest.mark.parametrize("difficulty", DIFFICULTIES)
def test_generated_puzzles_are_perfect_covers_with_valid_solutions(difficulty):
    generator = PuzzleGenerator()
    for i in range(8):
        puzzle = generator.generate(difficulty, f"cover-{i}")
        assert puzzle.seed == f"cover-{i}"
        assert len(puzzle.cells) % 2 == 0

        region_cells = [c for r in puzzle.regions for c in r.cells]
        assert len(region_cells) == len(set(region_cells))
        assert set(region_cells) == set(puzzle.cells)

        assert puzzle.solution is not None
        assert validate_puzzle(puzzle.with_placements(puzzle.solution)).is_valid
        assert ConstraintChecker.is_complete_solution(puzzle, puzzle.solution)


def test_unseeded_generation_reports_its_seed():
    generator = PuzzleGenerator()
    a = generator.generate("easy")
    b = generator.generate("easy")
    assert a.seed and b.seed and a.seed != b.seed
    assert ConstraintChecker.is_complete_solution(a, a.solution)


def test_unknown_difficulty_raises():
    with pytest.raises(ValueError):
        PuzzleGenerator().generate("extreme", "abc")


def test_constraint_failures_fall_back_to_safe_template():
    generator = PuzzleGenerator(catalog=TemplateCatalog(templates={"easy": [IMPOSSIBLE]}))
    puzzle = generator.generate("easy", "stuck")

    assert puzzle.seed == "stuck"
    assert puzzle.template_id == FALLBACK_TEMPLATE.id
    assert ConstraintChecker.is_complete_solution(puzzle, puzzle.solution)
    assert generator.catalog.failures.failure_count(IMPOSSIBLE) == generator.config.max_retries + 1
    assert generator.stats['fallbacks'] == 1


def test_fallback_is_deterministic():
    make = lambda: PuzzleGenerator(catalog=TemplateCatalog(templates={"easy": [IMPOSSIBLE]}))
    assert make().generate("easy", "stuck").solution == make().generate("easy", "stuck").solution


def test_unseeded_fallback_reports_the_seed_it_used(monkeypatch):
    # "stuck-validation-fallback" is a seed the fallback template accepts
    monkeypatch.setattr(PuzzleGenerator, "_fresh_seed", staticmethod(lambda: "stuck"))
    generator = PuzzleGenerator(config=GeneratorConfig(max_retries=1),
                                catalog=TemplateCatalog(templates={"easy": [IMPOSSIBLE]}))
    puzzle = generator.generate("easy")

    assert puzzle.template_id == FALLBACK_TEMPLATE.id
    assert puzzle.seed == "stuck-validation-fallback"
    replay = PuzzleGenerator().try_template(FALLBACK_TEMPLATE, puzzle.seed)
    assert replay.status == OK
    assert replay.puzzle.solution == puzzle.solution


def test_structural_failure_degrades_to_empty_stub():
    catalog = TemplateCatalog(templates={"easy": [BROKEN]}, fallback=BROKEN)
    generator = PuzzleGenerator(config=GeneratorConfig(max_retries=2), catalog=catalog)
    puzzle = generator.generate("easy", "broken-seed")

    assert puzzle.seed == "broken-seed"
    assert puzzle.cells == []
    assert puzzle.regions == []
    assert puzzle.available_dominoes == []
    assert puzzle.solution is None
    assert generator.stats['degraded'] == 1


def test_constraint_failure_degrades_to_unsolved_candidate():
    catalog = TemplateCatalog(templates={"easy": [IMPOSSIBLE]}, fallback=IMPOSSIBLE)
    puzzle = PuzzleGenerator(config=GeneratorConfig(max_retries=1), catalog=catalog).generate("easy", "bad")

    assert puzzle.seed == "bad"
    assert len(puzzle.cells) == 4
    assert puzzle.placements == []
    assert puzzle.solution is None
    assert len(puzzle.regions) == 1


def test_successful_generation_fills_cache():
    generator = PuzzleGenerator()
    puzzle = generator.generate("easy", "cached")
    assert generator.cache.get("cached") == puzzle.solution


def test_module_level_generate_puzzle():
    puzzle = generate_puzzle("hard", "module-level")
    assert puzzle.seed == "module-level"
    assert puzzle.difficulty == "hard"


# -----------------------------------------------------------------------------
# Solving through the cache
# -----------------------------------------------------------------------------
def test_solve_with_cache_prefers_stored_solution():
    generator = PuzzleGenerator()
    puzzle = generator.generate("easy", "stored")
    solved = generator.solve_with_cache(puzzle)
    assert solved.placements == puzzle.solution


def test_solve_with_cache_uses_cache_when_solution_missing():
    generator = PuzzleGenerator()
    puzzle = generator.generate("easy", "from-cache")
    stripped = puzzle.with_placements([])
    stripped.solution = None

    solved = generator.solve_with_cache(stripped)
    assert solved.placements == puzzle.solution


def test_solve_with_cache_ignores_stale_entry():
    cache = SolutionCache()
    generator = PuzzleGenerator(cache=cache)
    puzzle = generator.try_template(FALLBACK_TEMPLATE, "stale").puzzle
    puzzle.solution = None
    cache.set("stale", [Placement("domino-0", 0, 0)])

    solved = generator.solve_with_cache(puzzle)
    assert solved is not None
    assert ConstraintChecker.is_complete_solution(puzzle, solved.placements)
    assert cache.get("stale") == solved.placements


def test_unsolvable_puzzle_marks_template_failed():
    catalog = TemplateCatalog(templates={"easy": [IMPOSSIBLE]}, fallback=IMPOSSIBLE)
    generator = PuzzleGenerator(config=GeneratorConfig(max_retries=0), catalog=catalog)
    puzzle = generator.generate("easy", "nope")
    before = catalog.failures.failure_count(IMPOSSIBLE)

    assert generator.solve_with_cache(puzzle) is None
    assert catalog.failures.failure_count(IMPOSSIBLE) == before + 1
