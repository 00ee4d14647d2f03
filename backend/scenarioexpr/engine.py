"""
Condition Engine.

Host-facing entry point: compiles condition documents and decides whether
they hold.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

from .config import EngineConfig
from .logic.analyzer import AnalysisResult, ExpressionAnalyzer
from .logic.evaluator import ExpressionEvaluator
from .logic.expression import Expression, to_boolean
from .logic.parser import ExpressionParser
from .logic.registry import EntryPointRegistry, ProcedureRegistry

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = __package__


class ConditionEngine:
    """
    High-level engine for scenario conditions.

    Parsing and evaluation errors are raised to the caller unchanged; the
    host decides whether a failed condition fails, skips or retries a run.
    """

    def __init__(
        self,
        registry: Optional[ProcedureRegistry] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Initialize the engine.

        Args:
            registry: Condition registry. Defaults to entry point discovery
                using config.entry_point_group.
            config: Engine configuration.
        """
        self.config = config or EngineConfig()
        if registry is None:
            registry = EntryPointRegistry(self.config.entry_point_group)
        self.registry = registry
        logging.getLogger(PACKAGE_LOGGER).setLevel(self.config.level)

        self.parser = ExpressionParser(self.registry, validate_names=self.config.validate_names)
        self.evaluator = ExpressionEvaluator(self.registry)
        self.analyzer = ExpressionAnalyzer()

    def compile(self, document: Any) -> Expression:
        """Parse a document. Expressions are passed through unchanged."""
        if isinstance(document, Expression):
            return document
        return self.parser.parse(document)

    def evaluate(self, document: Any) -> Expression:
        """Evaluate a document or a compiled expression."""
        return self.evaluator.evaluate(self.compile(document))

    def holds(self, document: Any) -> bool:
        """Whether the condition holds."""
        expression = self.compile(document)
        result = to_boolean(self.evaluator.evaluate(expression))
        if logger.isEnabledFor(logging.INFO):
            logger.info("%s -> %s", self.analyzer.describe(expression), result)
        return result

    def check_file(self, path: Union[str, Path]) -> bool:
        """Whether the condition stored in a YAML file holds."""
        return self.holds(self.parser.parse_file(path))

    def analyze(self, document: Any) -> AnalysisResult:
        """Statically analyze a document against the engine's registry."""
        return self.analyzer.analyze(self.compile(document), self.registry)
