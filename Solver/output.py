import json
from typing import Dict, Optional
from datetime import datetime

from .puzzle import Puzzle, Cell
from .edges import placement_to_edge
from .constraints import ConstraintChecker
from .board import board_from_puzzle, cell_value, EMPTY


class SolutionFormatter:
    """Formats puzzles and their solutions for output"""

    @staticmethod
    def format_solution_json(puzzle: Puzzle, stats: Optional[Dict] = None) -> Dict:
        """
        Format the current placements as JSON
        """
        validation = ConstraintChecker.validate_puzzle(puzzle)
        covered = {c for p in puzzle.placements for c in p.cells()}

        solution = {
            'puzzle_info': {
                'id': puzzle.id,
                'seed': puzzle.seed,
                'difficulty': puzzle.difficulty,
                'template_id': puzzle.template_id,
                'total_cells': len(puzzle.cells),
                'total_regions': len(puzzle.regions),
                'total_dominoes': len(puzzle.available_dominoes),
                'solved': validation.is_valid and all(c in covered for c in puzzle.cells),
                'timestamp': datetime.now().isoformat()
            },
            'solving_stats': stats or {},
            'placements': [],
            'region_validation': ConstraintChecker.region_report(puzzle)
        }

        for placement in puzzle.placements:
            domino = puzzle.domino_by_id(placement.domino_id)
            first, second = placement_to_edge(placement)
            region_first = puzzle.region_for_cell(first)
            region_second = puzzle.region_for_cell(second)
            solution['placements'].append({
                'domino_id': placement.domino_id,
                'pips': [domino.left, domino.right] if domino else None,
                'orientation': placement.orientation,
                'positions': [
                    {'row': first.row, 'col': first.col},
                    {'row': second.row, 'col': second.col}
                ],
                'regions': [region_first.id if region_first else None,
                            region_second.id if region_second else None]
            })

        return solution

    @staticmethod
    def format_solution_human_readable(puzzle: Puzzle) -> str:
        """
        Format placements and region status as text
        """
        lines = []
        lines.append("=" * 60)
        lines.append("PIPS PUZZLE SOLUTION")
        lines.append("=" * 60)
        lines.append(f"\nSeed: {puzzle.seed} | Difficulty: {puzzle.difficulty} | "
                     f"Template: {puzzle.template_id}")
        lines.append(f"Puzzle has {len(puzzle.cells)} cells, {len(puzzle.regions)} regions")
        lines.append(f"Placed {len(puzzle.placements)} dominoes\n")

        lines.append("DOMINO PLACEMENTS:")
        lines.append("-" * 60)

        for i, placement in enumerate(puzzle.placements, 1):
            domino = puzzle.domino_by_id(placement.domino_id)
            first, second = placement_to_edge(placement)
            pips = f"({domino.left},{domino.right})" if domino else "(?,?)"
            lines.append(
                f"{i:2d}. Domino {pips} "
                f"at {first!r}-{second!r} "
                f"[{placement.orientation}]"
            )

        lines.append("\n" + "=" * 60)
        lines.append("REGION VALIDATION:")
        lines.append("-" * 60)

        for region_id, info in ConstraintChecker.region_report(puzzle).items():
            satisfied = "✓" if info['satisfied'] else "✗"
            lines.append(
                f"Region {region_id:>10s}: {info['label']:6s} "
                f"→ Sum: {info['actual_sum']:3d} {satisfied}"
            )

        lines.append("=" * 60)

        return "\n".join(lines)

    @staticmethod
    def format_grid_visualization(puzzle: Puzzle) -> str:
        """
        Text grid over the bounding box: pip values where dominoes sit,
        '·' for open active cells, blank for cells outside the shape.
        """
        if not puzzle.cells:
            return "Empty puzzle"

        board = board_from_puzzle(puzzle)
        active = puzzle.cell_set()

        lines = []
        lines.append("\nGRID VISUALIZATION:")
        lines.append("-" * (puzzle.cols * 2 + 3))
        for r in range(puzzle.rows):
            row = []
            for c in range(puzzle.cols):
                cell = Cell(r, c)
                value = cell_value(board, cell)
                if cell not in active:
                    row.append(' ')
                elif value == EMPTY:
                    row.append('·')
                else:
                    row.append(str(value))
            lines.append("  " + " ".join(row))
        lines.append("-" * (puzzle.cols * 2 + 3))

        return "\n".join(lines)

    @staticmethod
    def save_solution(puzzle: Puzzle, stats: Optional[Dict], output_path: str):
        """
        Save solution to JSON file
        """
        solution = SolutionFormatter.format_solution_json(puzzle, stats)

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(solution, f, indent=2)

        print(f"\n✓ Solution saved to: {output_path}")

    @staticmethod
    def save_human_readable(puzzle: Puzzle, output_path: str):
        """
        Save human-readable solution to text file
        """
        text = SolutionFormatter.format_solution_human_readable(puzzle)
        text += "\n\n" + SolutionFormatter.format_grid_visualization(puzzle)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(text)

        print(f"✓ Human-readable solution saved to: {output_path}")
