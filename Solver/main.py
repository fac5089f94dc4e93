#!/usr/bin/env python3
"""
Pips Solver - Main Entry Point

Solves saved puzzle JSON files from scratch (any stored solution is ignored).

Usage:
    python -m Solver.main data/json/puzzle.json
    python -m Solver.main  # Solves all puzzles in data/json/
"""

import sys
import time
import traceback
from pathlib import Path
from typing import Optional

from .puzzle import load_puzzle
from .solver import BacktrackingSolver
from .constraints import ConstraintChecker
from .output import SolutionFormatter

# ============================================================================
# CONFIGURATION
# ============================================================================
PUZZLE_PATH = "data/json/easy-abc.json"   # Puzzle to solve by default
DATA_DIR = "data/json"                    # Where SOLVE_ALL looks for puzzles
OUTPUT_DIR = "data/debug"                 # Base output directory
SOLVE_ALL = True                          # Set True to solve all JSON puzzles

MAX_NODES = None
# Exploration budget for the backtracking search (None = unbounded)

TIMEOUT_SECONDS = 300
# Maximum time to spend solving a single puzzle
# ============================================================================


def solve_file(input_path: str, output_dir: Optional[str] = None, verbose: bool = True,
               max_nodes: Optional[int] = MAX_NODES,
               timeout_seconds: Optional[float] = TIMEOUT_SECONDS):
    """
    Solve a single puzzle file and save results.

    Args:
        input_path: Path to puzzle JSON
        output_dir: Directory for output files (default: data/debug/<puzzle_name>/)
        verbose: Print solving progress
        max_nodes: Exploration budget
        timeout_seconds: Maximum solving time in seconds

    Returns (solved, puzzle, solver).
    """
    puzzle_name = Path(input_path).stem

    if output_dir is None:
        output_dir = Path(OUTPUT_DIR) / puzzle_name

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    print(f"\n{'='*60}")
    print(f"Loading puzzle: {input_path}")
    print(f"Output directory: {output_dir}")
    print(f"{'='*60}")

    puzzle = None
    solver = None
    try:
        puzzle = load_puzzle(str(input_path))
        solver = BacktrackingSolver(puzzle.with_placements([]), verbose=verbose, max_nodes=max_nodes)

        if verbose:
            print("\nSolver Configuration:")
            print(f"  Node budget: {max_nodes if max_nodes is not None else 'unbounded'}")
            print(f"  Timeout: {timeout_seconds}s")

        start = time.time()
        solved = solver.solve(timeout_seconds=timeout_seconds)
        elapsed = time.time() - start

        if solved is not None:
            print(f"\n{'='*60}")
            print(f"SUCCESS! Puzzle solved in {elapsed:.2f}s ✓")
            print(f"{'='*60}")

            stats = dict(solver.stats, elapsed=round(elapsed, 3))
            SolutionFormatter.save_solution(solved, stats, str(output_dir / "solution.json"))
            SolutionFormatter.save_human_readable(solved, str(output_dir / "solution.txt"))

            if verbose:
                print("\n" + SolutionFormatter.format_solution_human_readable(solved))
                print(SolutionFormatter.format_grid_visualization(solved))

            if puzzle.solution and not ConstraintChecker.is_complete_solution(puzzle, puzzle.solution):
                print("⚠ Stored solution in the file does not satisfy the rules")

            return True, solved, solver

        print(f"\n{'='*60}")
        if solver.stats['budget_exhausted'] or solver.stats['timed_out']:
            print("STOPPED: search budget ran out ✗")
        else:
            print("NO SOLUTION: no tiling satisfies every region ✗")
        print(f"{'='*60}")
        return False, puzzle, solver

    except KeyboardInterrupt:
        print(f"\n\n{'='*60}")
        print("⚠ Solving interrupted by user (Ctrl+C)")
        print(f"{'='*60}")
        if solver is not None:
            solver._print_stats()
        return False, puzzle, solver

    except Exception as e:
        print(f"\nError while solving {input_path}: {e}")
        traceback.print_exc()
        return False, puzzle, solver


def solve_all_puzzles(data_dir: Optional[str] = None, output_dir: Optional[str] = None,
                      max_nodes: Optional[int] = MAX_NODES,
                      timeout_seconds: Optional[float] = TIMEOUT_SECONDS):
    """
    Solve all puzzles in data/json/ (or a specified directory)
    """
    data_path = Path(data_dir or DATA_DIR)
    if not data_path.exists():
        print(f"Error: Directory not found: {data_path}")
        return []

    json_files = sorted(data_path.glob("*.json"))
    if not json_files:
        print(f"No JSON puzzles found in {data_path}")
        return []

    print(f"\nFound {len(json_files)} puzzle(s) to solve")

    results = []
    for i, json_file in enumerate(json_files, 1):
        print(f"\n[{i}/{len(json_files)}] Solving {json_file.name}...")

        solved, puzzle, solver = solve_file(
            str(json_file),
            output_dir=str(Path(output_dir) / json_file.stem) if output_dir else None,
            verbose=False,
            max_nodes=max_nodes,
            timeout_seconds=timeout_seconds
        )

        results.append({
            'file': json_file.name,
            'solved': bool(solved),
            'cells': len(puzzle.cells) if puzzle else None,
            'nodes': solver.stats['nodes'] if solver else None,
            'backtracks': solver.stats['backtracks'] if solver else None,
        })
        print(f"  {'✓ SOLVED' if solved else '✗ FAILED'}")

    print(f"\n{'='*60}")
    print("SUMMARY")
    print(f"{'='*60}")
    solved_count = sum(1 for r in results if r['solved'])
    solve_rate = solved_count / len(results) * 100
    print(f"Solved: {solved_count}/{len(results)} puzzles ({solve_rate:.1f}%)")

    for r in results:
        status = "✓" if r['solved'] else "✗"
        print(f"{status} {r['file']:30s}", end="")
        if r['solved']:
            print(f" - {r['cells']} cells, {r['nodes']} nodes, {r['backtracks']} backtracks")
        else:
            print(" - Failed")

    return results


def main():
    """Main entry point"""
    if len(sys.argv) > 1:
        input_file = Path(sys.argv[1])
        if not input_file.exists():
            print(f"Error: File not found: {input_file}")
            sys.exit(1)
        solve_file(str(input_file), verbose=True)

    elif SOLVE_ALL:
        print(f"SOLVE_ALL mode enabled - solving all puzzles in {DATA_DIR}/")
        solve_all_puzzles()

    else:
        input_file = Path(PUZZLE_PATH)
        if not input_file.exists():
            print(f"Error: File not found: {input_file}")
            sys.exit(1)
        solve_file(str(input_file), verbose=True)


if __name__ == "__main__":
    main()
