"""
Expression tree for scenario conditions.

Grammar of a condition document:

    <Expression> = <Literal> | <Logical> | <Procedure Call>
                 | <Sequential> | <Parallel>

    <Literal>    = <Boolean> | <Number>
    <Logical>    = (All | Any | Not) [ <Expression>* ]
    <Procedure Call> = <Predicate Call>  ({Type: name})
                     | <Action Call>     ({Type: name, Params: {...}})

Every node is reached through an Expression handle. Copying a handle shares
the node; nodes are never copied or changed in place once built, so a node
is released exactly once, when the last handle referring to it goes away.
A tree is meant to be evaluated from a single thread at a time.
"""

from __future__ import annotations

import operator
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple, Union

from .errors import ArityError, EmptyExpressionError

if TYPE_CHECKING:
    from .registry import Condition, ProcedureRegistry


class Node:
    """Base class for expression payloads."""

    form = "Expression"


class Expression:
    """
    Shared handle to an expression node.

    Expression() owns nothing; Expression.make(NodeType, ...) builds a node
    and wraps it. Expression(other), copy.copy() and copy.deepcopy() all
    return a new handle on the same node.
    """

    __slots__ = ("_node", "__weakref__")

    def __init__(self, source: Optional[Union["Expression", Node]] = None):
        if isinstance(source, Expression):
            source = source._node
        self._node = source

    @classmethod
    def make(cls, node_type: type, *args: Any, **kwargs: Any) -> "Expression":
        """Build a node of node_type and return a fresh handle owning it."""
        if not (isinstance(node_type, type) and issubclass(node_type, Node)):
            raise TypeError(f"{node_type!r} is not an expression node type")
        return cls(node_type(*args, **kwargs))

    @property
    def node(self) -> Optional[Node]:
        return self._node

    @property
    def is_empty(self) -> bool:
        return self._node is None

    def shares_payload(self, other: "Expression") -> bool:
        """True if both handles refer to the same node."""
        return self._node is not None and self._node is other._node

    def swap(self, other: "Expression") -> None:
        self._node, other._node = other._node, self._node

    def evaluate(self, registry: Optional["ProcedureRegistry"] = None) -> "Expression":
        """Evaluate this expression, resolving predicates through registry."""
        from .evaluator import ExpressionEvaluator
        return ExpressionEvaluator(registry).evaluate(self)

    def __copy__(self) -> "Expression":
        return Expression(self._node)

    def __deepcopy__(self, memo: Dict[int, Any]) -> "Expression":
        # Nodes are immutable, so a deep copy still shares the payload.
        return Expression(self._node)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return self._node == other._node

    def __hash__(self) -> int:
        return hash(self._node)

    def __repr__(self) -> str:
        if self._node is None:
            return "Expression()"
        return f"Expression({self._node!r})"


@dataclass(frozen=True, eq=False)
class Literal(Node):
    """Constant boolean or number. Evaluates to itself."""

    value: Union[bool, float]

    form = "Literal"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return type(self.value) is type(other.value) and self.value == other.value

    def __hash__(self) -> int:
        return hash((type(self.value), self.value))


class LogicalOperator(Enum):
    """Logical combinators, keyed by their document spelling."""

    ALL = "All"
    ANY = "Any"
    NOT = "Not"

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @property
    def combinator(self) -> Callable[[bool, bool], bool]:
        return _COMBINATORS[self]

    @property
    def identity(self) -> bool:
        """Result of folding an empty operand list."""
        return self is not LogicalOperator.ANY

    @property
    def absorbing(self) -> Optional[bool]:
        """Partial result that ends the fold early, if any."""
        if self is LogicalOperator.ALL:
            return False
        if self is LogicalOperator.ANY:
            return True
        return None

    @property
    def arity(self) -> Optional[int]:
        """Required operand count; None means any number."""
        return 1 if self is LogicalOperator.NOT else None


_SYMBOLS = {
    LogicalOperator.ALL: "and",
    LogicalOperator.ANY: "or",
    LogicalOperator.NOT: "not",
}

# Negation folds a single operand into True with xor.
_COMBINATORS = {
    LogicalOperator.ALL: operator.and_,
    LogicalOperator.ANY: operator.or_,
    LogicalOperator.NOT: operator.xor,
}


@dataclass(frozen=True)
class Logical(Node):
    """Ordered operands combined with a logical operator."""

    operator: LogicalOperator
    operands: Tuple[Expression, ...] = ()

    form = "Logical"

    def __post_init__(self) -> None:
        object.__setattr__(self, "operands", tuple(self.operands))
        arity = self.operator.arity
        if arity is not None and len(self.operands) != arity:
            raise ArityError(self.operator.value, arity, len(self.operands))

    @property
    def combinator(self) -> Callable[[bool, bool], bool]:
        return self.operator.combinator

    @property
    def arity(self) -> Optional[int]:
        return self.operator.arity


@dataclass(frozen=True, eq=False)
class Procedure(Node):
    """
    Named external check.

    The name is fixed at parse time. The condition it names is looked up
    lazily and kept for the lifetime of the node, so a tree stays bound to
    the first registry that evaluates it; later evaluations with another
    registry, or with none, reuse that condition. Parse the document again
    to evaluate it against a different registry.
    """

    name: str
    params: Dict[str, Any] = field(default_factory=dict)
    _call: Optional["Condition"] = field(default=None, init=False, repr=False)

    form = "Procedure"

    @property
    def bound(self) -> bool:
        return self._call is not None

    def bind(self, registry: "ProcedureRegistry") -> "Condition":
        """Resolve the name through registry once and cache the result."""
        if self._call is None:
            object.__setattr__(self, "_call", registry.resolve(self.name))
        return self._call

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Procedure):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.name == other.name
            and self.params == other.params
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.name))


class Predicate(Procedure):
    """Zero-argument check: {Type: name}."""

    form = "Predicate"


class Action(Procedure):
    """Check carrying arguments: {Type: name, Params: {...}}."""

    form = "Action"


@dataclass(frozen=True)
class Sequential(Node):
    operands: Tuple[Expression, ...] = ()

    form = "Sequential"


@dataclass(frozen=True)
class Parallel(Node):
    operands: Tuple[Expression, ...] = ()

    form = "Parallel"


@dataclass(frozen=True, eq=False)
class Result(Node):
    """Opaque value returned by a procedure that is not a bool or number."""

    value: Any

    form = "Result"


def wrap(value: Any) -> Expression:
    """Convert a procedure's return value into an Expression."""
    if isinstance(value, Expression):
        return value
    if isinstance(value, bool):
        return Expression.make(Literal, value)
    if isinstance(value, (int, float)):
        return Expression.make(Literal, float(value))
    return Expression.make(Result, value)


def to_boolean(expression: Expression) -> bool:
    """
    Truth value of an evaluated expression.

    Only a boolean false literal is false. Any other result, including
    numbers and opaque procedure results, is true.
    """
    node = expression.node
    if node is None:
        raise EmptyExpressionError()
    if isinstance(node, Literal):
        return node.value is not False
    return True
