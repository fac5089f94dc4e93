# main.py
# Driver: template pick → greedy matching → validation → puzzle JSON + text preview.
# Optionally re-solves every generated puzzle from scratch as a check.
#
# Usage:
#   python main.py                 # BATCH_MODE or single DIFFICULTY/SEED below
#   python main.py hard            # one puzzle, random seed
#   python main.py easy abc        # one puzzle, explicit seed

# ==================================================================
# CONFIGURATION: Easy Toggle
# ==================================================================
BATCH_MODE = False                # Set to True to generate BATCH_SEEDS for every difficulty
DIFFICULTY = "easy"               # Used when BATCH_MODE = False
SEED = None                       # Explicit seed, or None for a random one
BATCH_SEEDS = ["abc", "def", "ghi", "daily-001", "daily-002"]
OUTPUT_DIR = "data/json"          # Puzzle JSON goes here (Solver.main reads it)
PREVIEW_DIR = "data/debug"        # Text previews go here
RESOLVE = True                    # Re-solve each puzzle with the backtracking solver
VERBOSE = False
# ==================================================================

import os
import sys
import time

from Generator import GeneratorConfig, PuzzleGenerator
from Generator.templates import DIFFICULTIES
from Solver.puzzle import save_puzzle
from Solver.solver import BacktrackingSolver
from Solver.output import SolutionFormatter


def ensure_dir(p):
    os.makedirs(p, exist_ok=True)


def generate_one(generator: PuzzleGenerator, difficulty: str, seed=None,
                 output_dir: str = OUTPUT_DIR, preview_dir: str = PREVIEW_DIR,
                 resolve: bool = RESOLVE):
    """
    Generate a single puzzle, save it, and print a preview.

    Returns the puzzle. A degraded puzzle (no solution) is still saved so
    the failure can be inspected.
    """
    ensure_dir(output_dir)
    ensure_dir(preview_dir)

    print(f"\n{'='*70}")
    print(f"Generating {difficulty} puzzle (seed={seed if seed else 'random'})")
    print(f"{'='*70}")

    start = time.time()
    puzzle = generator.generate(difficulty, seed)
    elapsed = time.time() - start

    print(f"[generate] {puzzle}")
    print(f"[generate] template={puzzle.template_id} in {elapsed*1000:.1f} ms")

    name = f"{difficulty}-{puzzle.seed}"
    out_json = os.path.join(output_dir, f"{name}.json")
    save_puzzle(puzzle, out_json)
    print(f"[output] Puzzle JSON: {out_json}")

    if puzzle.solution is None:
        print("⚠ Generation degraded: puzzle has no solution")
        return puzzle

    solved = puzzle.with_placements(puzzle.solution)
    out_txt = os.path.join(preview_dir, f"{name}.txt")
    SolutionFormatter.save_human_readable(solved, out_txt)
    print(SolutionFormatter.format_grid_visualization(solved))

    if resolve:
        solver = BacktrackingSolver(puzzle, verbose=VERBOSE,
                                    max_nodes=generator.config.solver_max_nodes)
        start = time.time()
        result = solver.solve()
        elapsed = time.time() - start
        if result is not None:
            print(f"[resolve] ✓ solved from scratch in {elapsed:.2f}s "
                  f"({solver.stats['nodes']} nodes)")
        else:
            print(f"[resolve] ✗ no solution found from scratch ({solver.stats['nodes']} nodes)")

    return puzzle


if __name__ == "__main__":
    generator = PuzzleGenerator(GeneratorConfig(verbose=VERBOSE))

    if len(sys.argv) > 1:
        difficulty = sys.argv[1]
        if difficulty not in DIFFICULTIES:
            print(f"Error: difficulty must be one of {DIFFICULTIES}")
            sys.exit(1)
        seed = sys.argv[2] if len(sys.argv) > 2 else None
        generate_one(generator, difficulty, seed)

    elif BATCH_MODE:
        print("\n" + "="*70)
        print("BATCH GENERATION MODE")
        print("="*70)

        results = {'success': [], 'degraded': [], 'failed': []}
        jobs = [(d, s) for d in DIFFICULTIES for s in BATCH_SEEDS]

        for i, (difficulty, seed) in enumerate(jobs, 1):
            print(f"\n[{i}/{len(jobs)}] {difficulty} / {seed}")
            try:
                puzzle = generate_one(generator, difficulty, seed)
                key = 'success' if puzzle.solution is not None else 'degraded'
                results[key].append(f"{difficulty}-{seed}")
            except Exception as e:
                print(f"\n❌ ERROR: {e}")
                results['failed'].append((f"{difficulty}-{seed}", str(e)))

        print("\n" + "="*70)
        print("BATCH GENERATION COMPLETE")
        print("="*70)
        print(f"\n✅ Successful: {len(results['success'])}/{len(jobs)}")
        if results['degraded']:
            print(f"⚠ Degraded: {len(results['degraded'])}/{len(jobs)}")
            for name in results['degraded']:
                print(f"   - {name}")
        if results['failed']:
            print(f"\n❌ Failed: {len(results['failed'])}/{len(jobs)}")
            for name, error in results['failed']:
                print(f"   - {name}: {error}")

        generator.print_stats()
        print(f"\nResults saved to: {OUTPUT_DIR}/")

    else:
        generate_one(generator, DIFFICULTY, SEED)
