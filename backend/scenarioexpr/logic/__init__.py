"""
Logic engine for scenario conditions.

Provides expression parsing, evaluation and analysis for condition documents.
"""

from .errors import (
    ArityError,
    EmptyExpressionError,
    ExpressionError,
    ParseError,
    ResolutionError,
    UnsupportedExpressionError,
)
from .expression import (
    Action,
    Expression,
    Literal,
    Logical,
    LogicalOperator,
    Parallel,
    Predicate,
    Procedure,
    Result,
    Sequential,
    to_boolean,
    wrap,
)
from .registry import Condition, EntryPointRegistry, ProcedureRegistry, StaticRegistry
from .parser import ExpressionParser, parse
from .evaluator import ExpressionEvaluator
from .analyzer import AnalysisResult, ExpressionAnalyzer

__all__ = [
    # Errors
    "ExpressionError",
    "ParseError",
    "ArityError",
    "ResolutionError",
    "EmptyExpressionError",
    "UnsupportedExpressionError",
    # Tree
    "Expression",
    "Literal",
    "Logical",
    "LogicalOperator",
    "Procedure",
    "Predicate",
    "Action",
    "Sequential",
    "Parallel",
    "Result",
    "to_boolean",
    "wrap",
    # Registry
    "Condition",
    "ProcedureRegistry",
    "StaticRegistry",
    "EntryPointRegistry",
    # Parsing, evaluation, analysis
    "ExpressionParser",
    "parse",
    "ExpressionEvaluator",
    "ExpressionAnalyzer",
    "AnalysisResult",
]
