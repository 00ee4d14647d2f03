"""
Expression Parser for condition documents.

Turns a loaded YAML document into an Expression tree.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

import yaml

from .errors import ArityError, ExpressionError, ParseError, ResolutionError
from .expression import (
    Action,
    Expression,
    Literal,
    Logical,
    LogicalOperator,
    Parallel,
    Predicate,
    Sequential,
)
from .registry import ProcedureRegistry

logger = logging.getLogger(__name__)

TYPE_KEY = "Type"
PARAMS_KEY = "Params"

NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def _preview(value: Any, limit: int = 40) -> str:
    text = repr(value)
    return text if len(text) <= limit else text[:limit] + "..."


class ExpressionParser:
    """
    Parser for condition documents.

    Converts documents like:
        {"All": [{"Any": [True, False]}, {"Type": "always_true"}]}

    Into an Expression tree:
        (and (or true false) (if always_true))

    Maps are matched against the recognized keys in priority order; the
    first key present decides the form.
    """

    LOGICAL_KEYS = {op.value: op for op in LogicalOperator}

    COMPOSITE_KEYS = {
        "Sequential": Sequential,
        "Parallel": Parallel,
    }

    def __init__(
        self,
        registry: Optional[ProcedureRegistry] = None,
        validate_names: bool = False,
    ):
        """
        Initialize the parser.

        Args:
            registry: Registry used to check predicate names while parsing.
            validate_names: Reject unknown predicate names at parse time
                instead of at evaluation time. Requires a registry.
        """
        if validate_names and registry is None:
            raise ValueError("validate_names requires a registry")
        self.registry = registry
        self.validate_names = validate_names
        self._declared: Optional[List[str]] = None

    def parse(self, document: Any) -> Expression:
        """
        Parse a document into an Expression.

        Args:
            document: A loaded YAML document (mapping, sequence or scalar).

        Returns:
            Expression handle owning the root of the tree.

        Raises:
            ParseError: If any part of the document is malformed.
        """
        return self._parse(document, "$")

    def parse_yaml(self, text: str) -> Expression:
        """Parse YAML text."""
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}") from e
        return self.parse(document)

    def parse_file(self, path: Union[str, Path]) -> Expression:
        """Parse a YAML file."""
        return self.parse_yaml(Path(path).read_text(encoding="utf-8"))

    def _parse(self, node: Any, path: str) -> Expression:
        if isinstance(node, Mapping):
            return self._parse_map(node, path)
        if isinstance(node, (list, tuple)):
            raise ParseError("sequence without operator context", path)
        return self._parse_scalar(node, path)

    def _parse_scalar(self, node: Any, path: str) -> Expression:
        """Parse a boolean or numeric literal."""
        if isinstance(node, bool):
            return Expression.make(Literal, node)

        if isinstance(node, (int, float)):
            return Expression.make(Literal, self._to_number(node, path))

        if isinstance(node, str):
            text = node.strip()
            if text.lower() == "true":
                return Expression.make(Literal, True)
            if text.lower() == "false":
                return Expression.make(Literal, False)
            if NUMBER_PATTERN.match(text):
                return Expression.make(Literal, self._to_number(text, path))

        raise ParseError(f"scalar {_preview(node)} is neither a boolean nor a number", path)

    def _to_number(self, value: Union[int, float, str], path: str) -> float:
        """Convert to a finite float."""
        try:
            number = float(value)
        except OverflowError:
            number = math.inf
        if not math.isfinite(number):
            raise ParseError(f"number {_preview(value)} is not finite", path)
        return number

    def _parse_map(self, node: Mapping, path: str) -> Expression:
        for key, op in self.LOGICAL_KEYS.items():
            if key in node:
                return self._parse_logical(op, node[key], f"{path}.{key}")

        for key, node_type in self.COMPOSITE_KEYS.items():
            if key in node:
                operands = self._parse_operands(node[key], f"{path}.{key}")
                logger.debug("(%s ...) at %s", key.lower(), path)
                return Expression.make(node_type, operands)

        if TYPE_KEY in node:
            return self._parse_procedure(node, path)

        keys = ", ".join(str(k) for k in node) or "none"
        raise ParseError(f"unrecognized expression form (keys: {keys})", path)

    def _parse_logical(self, op: LogicalOperator, operands_node: Any, path: str) -> Expression:
        """Parse All / Any / Not and every operand beneath it."""
        operands = self._parse_operands(operands_node, path)

        if op.arity is not None and len(operands) != op.arity:
            raise ArityError(op.value, op.arity, len(operands), path)

        logger.debug("(%s ...%d) at %s", op.symbol, len(operands), path)
        return Expression.make(Logical, op, operands)

    def _parse_operands(self, operands_node: Any, path: str) -> Tuple[Expression, ...]:
        if not isinstance(operands_node, (list, tuple)):
            raise ParseError(
                f"expected a sequence of operands, got {type(operands_node).__name__}",
                path,
            )
        return tuple(
            self._parse(each, f"{path}[{i}]") for i, each in enumerate(operands_node)
        )

    def _parse_procedure(self, node: Mapping, path: str) -> Expression:
        """Parse a predicate call or an action call."""
        name = node[TYPE_KEY]
        if not isinstance(name, str) or not name.strip():
            raise ParseError(f"{TYPE_KEY} must be a non-empty string", f"{path}.{TYPE_KEY}")
        name = name.strip()

        if PARAMS_KEY in node:
            params = node[PARAMS_KEY]
            if params is None:
                params = {}
            if not isinstance(params, Mapping):
                raise ParseError(f"{PARAMS_KEY} must be a map", f"{path}.{PARAMS_KEY}")
            logger.debug("(change %s) at %s", name, path)
            return Expression.make(Action, name, dict(params))

        if self.validate_names:
            self._check_declared(name)

        logger.debug("(if %s) at %s", name, path)
        return Expression.make(Predicate, name)

    def _check_declared(self, name: str) -> None:
        # Declared names are read once per parser.
        if self._declared is None:
            self._declared = list(self.registry.declared_names())
        if name not in self._declared:
            raise ResolutionError(name, self._declared)

    def validate(self, document: Any) -> Tuple[bool, Optional[str]]:
        """
        Validate a document without keeping the tree.

        Returns:
            Tuple of (is_valid, error_message).
        """
        try:
            self.parse(document)
            return True, None
        except ExpressionError as e:
            return False, str(e)


def parse(document: Any, registry: Optional[ProcedureRegistry] = None) -> Expression:
    """Parse a document with a default parser."""
    return ExpressionParser(registry).parse(document)
