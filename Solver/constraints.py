"""
Constraint checking for Pips puzzles

Key points:
 - Placement checks run in a fixed order and return stable reasons
 - A domino counts toward the region holding its anchor cell, once
 - Sum rules read the region pip total, value rules read per-domino sums
 - Unknown rule kinds fail closed
"""

from typing import List, Dict, Optional

from .puzzle import Puzzle, Placement, Region, Rule, RuleType, EdgeError, PlacementCheck, ValidationResult
from .edges import coverage_map, placements_to_edges, is_valid_tiling


ERR_DOMINO_NOT_FOUND = "Domino not found in available dominoes"
ERR_OUT_OF_BOUNDS = "Placement is out of bounds"
ERR_CELL_NOT_FOUND = "Cell does not exist in puzzle"
ERR_ALREADY_PLACED = "Domino is already placed"
ERR_OVERLAP = "Placement overlaps with existing domino"


# -----------------------------------------------------------------------------
# Constraint Checking
# -----------------------------------------------------------------------------
class ConstraintChecker:
    """Validates domino placements and region rules."""

    # ---------- placement checks ----------

    @staticmethod
    def validate_placement(puzzle: Puzzle, placement: Placement) -> PlacementCheck:
        """
        Check a single placement against the current board.

        Order matters for the reported reason:
          1) domino must be one of the puzzle's available dominoes
          2) both cells must be inside the bounding box
          3) both cells must be active cells of the shape
          4) the domino must not already be on the board
          5) neither cell may be covered by an existing placement
        """
        if puzzle.domino_by_id(placement.domino_id) is None:
            return PlacementCheck(False, ERR_DOMINO_NOT_FOUND)

        cells = placement.cells()
        active = puzzle.cell_set()
        if len(cells) != 2:
            return PlacementCheck(False, ERR_OUT_OF_BOUNDS)
        for cell in cells:
            if not puzzle.in_bounds(cell):
                return PlacementCheck(False, ERR_OUT_OF_BOUNDS)
        for cell in cells:
            if cell not in active:
                return PlacementCheck(False, ERR_CELL_NOT_FOUND)

        if any(p.domino_id == placement.domino_id for p in puzzle.placements):
            return PlacementCheck(False, ERR_ALREADY_PLACED)

        covered = coverage_map(puzzle.placements)
        for cell in cells:
            if cell in covered:
                return PlacementCheck(False, f"{ERR_OVERLAP} at {cell!r}")

        return PlacementCheck(True)

    # ---------- region values ----------

    @staticmethod
    def region_domino_values(puzzle: Puzzle, region: Region) -> List[int]:
        """Pip sums of the dominoes anchored inside `region`, in cell order."""
        covered = coverage_map(puzzle.placements)
        values = []
        for cell in region.cells:
            placement = covered.get(cell)
            if placement is None or placement.anchor != cell:
                continue
            domino = puzzle.domino_by_id(placement.domino_id)
            if domino is not None:
                values.append(domino.sum())
        return values

    @staticmethod
    def region_sum(puzzle: Puzzle, region: Region) -> int:
        return sum(ConstraintChecker.region_domino_values(puzzle, region))

    @staticmethod
    def rule_satisfied(rule: Optional[Rule], total: int, values: List[int]) -> bool:
        if rule is None:
            return False

        if rule.type == RuleType.SUM_AT_LEAST:
            return total >= rule.value
        elif rule.type == RuleType.SUM_AT_MOST:
            return total <= rule.value
        elif rule.type == RuleType.SUM_EQUALS:
            return total == rule.value
        elif rule.type == RuleType.SUM_LESS_THAN:
            return total < rule.value
        elif rule.type == RuleType.SUM_GREATER_THAN:
            return total > rule.value
        elif rule.type == RuleType.VALUES_EQUAL:
            return len(set(values)) <= 1
        elif rule.type == RuleType.VALUES_ALL_DIFFERENT:
            return len(set(values)) == len(values)

        # Unknown kind -> fail closed
        return False

    @staticmethod
    def region_satisfied(puzzle: Puzzle, region: Region) -> bool:
        values = ConstraintChecker.region_domino_values(puzzle, region)
        return ConstraintChecker.rule_satisfied(region.rule, sum(values), values)

    # ---------- whole puzzle ----------

    @staticmethod
    def validate_puzzle(puzzle: Puzzle) -> ValidationResult:
        invalid_regions = [r.id for r in puzzle.regions
                           if not ConstraintChecker.region_satisfied(puzzle, r)]

        is_valid = not invalid_regions
        if is_valid:
            message = "All regions satisfied!"
        else:
            message = f"{len(invalid_regions)} region(s) do not satisfy their constraints."

        return ValidationResult(is_valid=is_valid, invalid_regions=invalid_regions, message=message)

    @staticmethod
    def is_complete_solution(puzzle: Puzzle, placements: List[Placement]) -> bool:
        """
        True when `placements` is a perfect tiling of the active cells using
        distinct available dominoes and every region rule holds.
        """
        ids = [p.domino_id for p in placements]
        if len(ids) != len(set(ids)):
            return False
        if any(puzzle.domino_by_id(i) is None for i in ids):
            return False
        try:
            edges = placements_to_edges(placements)
        except EdgeError:
            return False
        if not is_valid_tiling(puzzle.cells, edges):
            return False
        return ConstraintChecker.validate_puzzle(puzzle.with_placements(placements)).is_valid

    @staticmethod
    def region_report(puzzle: Puzzle) -> Dict[str, Dict]:
        """Per-region rule, current total and status, for output."""
        report = {}
        for region in puzzle.regions:
            values = ConstraintChecker.region_domino_values(puzzle, region)
            rule = region.rule
            report[region.id] = {
                'rule_type': rule.type.value if rule and isinstance(rule.type, RuleType) else (rule.type if rule else None),
                'rule_value': rule.value if rule else None,
                'label': rule.label() if rule else "?",
                'cells': len(region.cells),
                'actual_sum': sum(values),
                'domino_values': values,
                'satisfied': ConstraintChecker.rule_satisfied(rule, sum(values), values),
            }
        return report


def validate_placement(puzzle: Puzzle, placement: Placement) -> PlacementCheck:
    return ConstraintChecker.validate_placement(puzzle, placement)


def validate_puzzle(puzzle: Puzzle) -> ValidationResult:
    return ConstraintChecker.validate_puzzle(puzzle)
