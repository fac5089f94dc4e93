"""
Pips Puzzle Engine: Solver Package

Puzzle model, edge/placement conversions, constraint checking and a
backtracking solver for Pips domino puzzles.
"""

from .puzzle import (Puzzle, Cell, Region, Domino, Placement, Rule, RuleType,
                     EdgeError, ValidationResult, PlacementCheck, full_domino_set,
                     load_puzzle, save_puzzle)
from .constraints import ConstraintChecker, validate_placement, validate_puzzle
from .solver import BacktrackingSolver, solve_puzzle
from .output import SolutionFormatter

__version__ = "1.0.0"
__all__ = [
    'Puzzle',
    'Cell',
    'Region',
    'Domino',
    'Placement',
    'Rule',
    'RuleType',
    'EdgeError',
    'ValidationResult',
    'PlacementCheck',
    'full_domino_set',
    'load_puzzle',
    'save_puzzle',
    'ConstraintChecker',
    'validate_placement',
    'validate_puzzle',
    'BacktrackingSolver',
    'solve_puzzle',
    'SolutionFormatter'
]
