"""
Scenario Expression: condition documents for scenario tests.

Authors write nested All / Any / named-check documents; this package parses
them into expression trees and decides whether they hold.
"""

from .config import EngineConfig
from .engine import ConditionEngine
from .logic import (
    ArityError,
    EmptyExpressionError,
    Expression,
    ExpressionError,
    ExpressionEvaluator,
    ExpressionParser,
    ParseError,
    ResolutionError,
    StaticRegistry,
    EntryPointRegistry,
    UnsupportedExpressionError,
    parse,
    to_boolean,
)

__version__ = "1.0.0"
__all__ = [
    "ConditionEngine",
    "EngineConfig",
    "Expression",
    "ExpressionParser",
    "ExpressionEvaluator",
    "StaticRegistry",
    "EntryPointRegistry",
    "parse",
    "to_boolean",
    "ExpressionError",
    "ParseError",
    "ArityError",
    "ResolutionError",
    "EmptyExpressionError",
    "UnsupportedExpressionError",
]
