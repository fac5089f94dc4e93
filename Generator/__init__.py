"""
Pips Puzzle Engine: Generator Package

Seeded puzzle generation from shape templates.
"""

from .rng import SeededRandom
from .templates import ShapeTemplate, TemplateCatalog, FALLBACK_TEMPLATE, templates_for_difficulty
from .cache import SolutionCache
from .generator import GeneratorConfig, PuzzleGenerator, generate_puzzle, solve_with_cache

__version__ = "1.0.0"
__all__ = [
    'SeededRandom',
    'ShapeTemplate',
    'TemplateCatalog',
    'FALLBACK_TEMPLATE',
    'templates_for_difficulty',
    'SolutionCache',
    'GeneratorConfig',
    'PuzzleGenerator',
    'generate_puzzle',
    'solve_with_cache'
]
