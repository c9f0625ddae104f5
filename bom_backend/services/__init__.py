"""
Service layer for the BOM dependency rules backend.

This package contains the rule evaluation engine, the database-backed BOM
validator and rule administration.
"""

from .dependency_engine import ValidationResult, evaluate_rules
from .formula import evaluate_formula, try_evaluate_formula
