"""
Expression Analyzer.

Inspects a parsed condition tree without evaluating it: which predicates it
calls, which of them a registry cannot provide, and a compact rendering for
diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from .expression import (
    Action,
    Expression,
    Literal,
    Logical,
    Parallel,
    Procedure,
    Result,
    Sequential,
)
from .registry import ProcedureRegistry


@dataclass
class AnalysisResult:
    """Result of expression analysis."""
    procedures: List[str] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)
    unsupported: List[str] = field(default_factory=list)
    node_count: int = 0
    depth: int = 0
    rendering: str = ""

    @property
    def evaluable(self) -> bool:
        """True if nothing is known to fail at evaluation time."""
        return not self.unresolved and not self.unsupported

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "procedures": self.procedures,
            "unresolved": self.unresolved,
            "unsupported": self.unsupported,
            "node_count": self.node_count,
            "depth": self.depth,
            "rendering": self.rendering,
            "evaluable": self.evaluable,
        }


def _children(expression: Expression) -> List[Expression]:
    node = expression.node
    if isinstance(node, (Logical, Sequential, Parallel)):
        return list(node.operands)
    return []


class ExpressionAnalyzer:
    """
    Static analysis of condition trees.

    Provides:
    - Procedure enumeration in document order
    - Unresolved name detection against a registry
    - Unsupported form detection
    - S-expression rendering
    """

    def walk(self, expression: Expression) -> Iterator[Expression]:
        """Yield every handle in the tree, depth first, in document order."""
        yield expression
        for child in _children(expression):
            yield from self.walk(child)

    def procedures(self, expression: Expression) -> List[str]:
        """Names of all procedures the tree calls, first occurrence first."""
        names: List[str] = []
        for each in self.walk(expression):
            node = each.node
            if isinstance(node, Procedure) and node.name not in names:
                names.append(node.name)
        return names

    def unresolved(self, expression: Expression, registry: ProcedureRegistry) -> List[str]:
        """Predicate names the registry does not declare."""
        declared = set(registry.declared_names())
        return [name for name in self.procedures(expression) if name not in declared]

    def depth(self, expression: Expression) -> int:
        if expression.is_empty:
            return 0
        return 1 + max((self.depth(c) for c in _children(expression)), default=0)

    def describe(self, expression: Expression) -> str:
        """
        Render a tree as an s-expression.

        {"All": [{"Any": [true, false]}, {"Type": "always_true"}]}
        renders as (and (or true false) (if always_true)).
        """
        node = expression.node

        if node is None:
            return "()"
        if isinstance(node, Literal):
            if isinstance(node.value, bool):
                return "true" if node.value else "false"
            return repr(node.value)
        if isinstance(node, Logical):
            return self._describe_list(node.operator.symbol, node.operands)
        if isinstance(node, Sequential):
            return self._describe_list("sequential", node.operands)
        if isinstance(node, Parallel):
            return self._describe_list("parallel", node.operands)
        if isinstance(node, Action):
            return f"(change {node.name})"
        if isinstance(node, Procedure):
            return f"(if {node.name})"
        if isinstance(node, Result):
            return f"(result {node.value!r})"
        return f"({type(node).__name__.lower()})"

    def _describe_list(self, head: str, operands) -> str:
        parts = [head] + [self.describe(each) for each in operands]
        return "(" + " ".join(parts) + ")"

    def analyze(
        self,
        expression: Expression,
        registry: Optional[ProcedureRegistry] = None
    ) -> AnalysisResult:
        """
        Analyze an expression tree.

        Args:
            expression: The parsed expression.
            registry: Optional registry to check predicate names against.

        Returns:
            AnalysisResult with analysis details.
        """
        result = AnalysisResult()
        result.procedures = self.procedures(expression)
        if registry is not None:
            result.unresolved = self.unresolved(expression, registry)

        for each in self.walk(expression):
            if each.is_empty:
                continue
            result.node_count += 1
            if isinstance(each.node, (Action, Sequential, Parallel)):
                result.unsupported.append(each.node.form)

        result.depth = self.depth(expression)
        result.rendering = self.describe(expression)
        return result
