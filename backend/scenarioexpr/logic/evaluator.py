"""
Expression Evaluator for condition trees.

Reduces an Expression tree to a result, calling named predicates through
a procedure registry.
"""

from __future__ import annotations

import logging
from typing import Optional

from .errors import EmptyExpressionError, ResolutionError, UnsupportedExpressionError
from .expression import (
    Action,
    Expression,
    Literal,
    Logical,
    Parallel,
    Predicate,
    Result,
    Sequential,
    to_boolean,
    wrap,
)
from .registry import ProcedureRegistry

logger = logging.getLogger(__name__)


class ExpressionEvaluator:
    """
    Evaluator for condition expressions.

    Logical operands are evaluated left to right and stop as soon as the
    outcome is decided. Failures from predicates or from the registry are
    never turned into a false result; they propagate to the caller.
    """

    UNSUPPORTED = (Action, Sequential, Parallel)

    def __init__(self, registry: Optional[ProcedureRegistry] = None):
        self.registry = registry

    def evaluate(self, expression: Expression) -> Expression:
        """
        Evaluate an expression.

        Args:
            expression: The expression to evaluate.

        Returns:
            The result as an Expression, usually a boolean Literal.

        Raises:
            EmptyExpressionError: If the handle owns no node.
            ResolutionError: If a predicate name cannot be resolved.
            UnsupportedExpressionError: For forms without an evaluation rule.
        """
        node = expression.node

        if node is None:
            raise EmptyExpressionError()

        if isinstance(node, (Literal, Result)):
            return Expression(node)

        if isinstance(node, Logical):
            return self._eval_logical(node)

        if isinstance(node, Predicate):
            return self._eval_predicate(node)

        if isinstance(node, self.UNSUPPORTED):
            raise UnsupportedExpressionError(node.form)

        raise UnsupportedExpressionError(type(node).__name__)

    def test(self, expression: Expression) -> bool:
        """Evaluate an expression and return its truth value."""
        return to_boolean(self.evaluate(expression))

    def _eval_logical(self, node: Logical) -> Expression:
        """Fold operands with the node's combinator, short-circuiting."""
        op = node.operator
        result = op.identity

        for index, operand in enumerate(node.operands):
            result = node.combinator(result, self.test(operand))
            if op.absorbing is not None and result == op.absorbing:
                skipped = len(node.operands) - index - 1
                if skipped:
                    logger.debug("%s short-circuited, %d operand(s) skipped", op.symbol, skipped)
                break

        return Expression.make(Literal, bool(result))

    def _eval_predicate(self, node: Predicate) -> Expression:
        """Call the condition bound to the predicate's name."""
        if not node.bound:
            if self.registry is None:
                raise ResolutionError(node.name)
            logger.debug("Resolving predicate %s", node.name)
        call = node.bind(self.registry)

        value = call()
        logger.debug("Predicate %s returned %r", node.name, value)
        return wrap(value)
