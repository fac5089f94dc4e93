"""
Template health report: which templates produce puzzles, and why the others fail.

Runs single attempts on every template over a seed list, then reports
per-template outcomes. Greedy matching knows nothing about region rules, so
a low success rate on a template usually means its rules are too tight for
random dominoes, while any structural failure means the template data is broken.
"""

import sys
import time
from typing import List, Dict, Optional

from .generator import PuzzleGenerator, OK, STRUCTURE_FAILED, CONSTRAINTS_FAILED
from .templates import ShapeTemplate, TemplateCatalog, DIFFICULTIES


def analyze_template(generator: PuzzleGenerator, template: ShapeTemplate,
                     seeds: List[str], verbose: bool = False) -> Dict:
    """Tally attempt outcomes for one template."""
    outcomes = {OK: 0, STRUCTURE_FAILED: 0, CONSTRAINTS_FAILED: 0}
    problems: Dict[str, int] = {}

    start = time.time()
    for seed in seeds:
        result = generator.try_template(template, seed)
        outcomes[result.status] += 1
        for problem in result.problems or []:
            problems[problem] = problems.get(problem, 0) + 1
    elapsed = time.time() - start

    report = {
        'template_id': template.id,
        'cells': template.cell_count,
        'regions': template.region_count,
        'tileable': template.is_tileable(),
        'attempts': len(seeds),
        'successes': outcomes[OK],
        'structure_failures': outcomes[STRUCTURE_FAILED],
        'constraint_failures': outcomes[CONSTRAINTS_FAILED],
        'success_rate': outcomes[OK] / len(seeds) if seeds else 0.0,
        'problems': problems,
        'elapsed': elapsed,
    }

    if verbose:
        status = "✓" if report['successes'] else "✗"
        print(f"  {status} {template.id}: {report['successes']}/{len(seeds)} ok, "
              f"{report['structure_failures']} structural, "
              f"{report['constraint_failures']} constraint")
        for problem, count in sorted(problems.items(), key=lambda kv: -kv[1])[:3]:
            print(f"      {count}x {problem}")

    return report


def template_health_report(difficulty: Optional[str] = None, num_seeds: int = 50,
                           catalog: Optional[TemplateCatalog] = None,
                           verbose: bool = True) -> List[Dict]:
    """Analyze every template of one tier (or all tiers) over seeds 'diag-0'..'diag-N'."""
    generator = PuzzleGenerator(catalog=catalog)
    seeds = [f"diag-{i}" for i in range(num_seeds)]
    tiers = [difficulty] if difficulty else list(DIFFICULTIES)

    reports = []
    for tier in tiers:
        if verbose:
            print(f"\n{'=' * 60}")
            print(f"TEMPLATES: {tier.upper()}")
            print(f"{'=' * 60}")
        for template in generator.catalog.templates_for(tier):
            reports.append(analyze_template(generator, template, seeds, verbose=verbose))

    if verbose:
        _print_summary(reports)
    return reports


def _print_summary(reports: List[Dict]) -> None:
    broken = [r for r in reports if r['structure_failures']]
    never = [r for r in reports if not r['successes'] and not r['structure_failures']]
    healthy = [r for r in reports if r['successes']]

    print(f"\n{'=' * 60}")
    print("TEMPLATE HEALTH SUMMARY")
    print(f"{'=' * 60}")
    print(f"Healthy: {len(healthy)}/{len(reports)}")
    print(f"Structurally broken: {len(broken)}/{len(reports)}")
    print(f"Never satisfied by greedy matching: {len(never)}/{len(reports)}")

    if healthy:
        avg = sum(r['success_rate'] for r in healthy) / len(healthy)
        print(f"Average success rate (healthy templates): {avg:.1%}")

    if broken:
        print("\nBroken templates:")
        for r in broken:
            reason = "odd cell count" if not r['tileable'] else "layout/region problems"
            print(f"  {r['template_id']}: {reason}")


if __name__ == "__main__":
    template_health_report(sys.argv[1] if len(sys.argv) > 1 else None)
