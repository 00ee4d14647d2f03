"""
Tests for the condition document parser.
"""

import pytest

from backend.scenarioexpr.logic import (
    Action,
    ArityError,
    Expression,
    ExpressionParser,
    Literal,
    Logical,
    LogicalOperator,
    Parallel,
    ParseError,
    Predicate,
    ResolutionError,
    Sequential,
    StaticRegistry,
    parse,
)


class TestScalarParsing:
    """Tests for literal documents."""

    @pytest.mark.parametrize("document", [True, False])
    def test_boolean(self, document):
        """Test boolean scalars."""
        assert parse(document).node == Literal(document)

    @pytest.mark.parametrize("document, expected", [(0, 0.0), (3, 3.0), (2.5, 2.5), (-1.25, -1.25)])
    def test_number_becomes_float(self, document, expected):
        """Test that numbers are stored as floats."""
        node = parse(document).node
        assert node == Literal(expected)
        assert isinstance(node.value, float)

    @pytest.mark.parametrize("document, expected", [
        ("true", True),
        ("FALSE", False),
        (" True ", True),
        ("4.5", 4.5),
    ])
    def test_string_scalars(self, document, expected):
        """Test quoted booleans and numbers."""
        assert parse(document).node == Literal(expected)

    @pytest.mark.parametrize("document", ["maybe", "", None])
    def test_invalid_scalar(self, document):
        """Test that other scalars are rejected."""
        with pytest.raises(ParseError) as exc_info:
            parse(document)
        assert "neither a boolean nor a number" in str(exc_info.value)


class TestLogicalParsing:
    """Tests for All / Any / Not."""

    def test_all(self):
        """Test that All becomes a conjunction in document order."""
        expression = parse({"All": [True, {"Type": "ready"}]})
        node = expression.node
        assert isinstance(node, Logical)
        assert node.operator is LogicalOperator.ALL
        assert node.operands[0].node == Literal(True)
        assert node.operands[1].node == Predicate("ready")

    def test_any(self):
        """Test that Any becomes a disjunction."""
        node = parse({"Any": [False]}).node
        assert node.operator is LogicalOperator.ANY

    def test_empty_operands(self):
        """Test that an empty operand list is accepted."""
        assert parse({"All": []}).node.operands == ()

    def test_not_single_operand(self):
        """Test that Not accepts exactly one operand."""
        node = parse({"Not": [True]}).node
        assert node.operator is LogicalOperator.NOT
        assert len(node.operands) == 1

    @pytest.mark.parametrize("operands", [[], [True, False]])
    def test_not_arity(self, operands):
        """Test that Not with the wrong operand count fails."""
        with pytest.raises(ArityError) as exc_info:
            parse({"Not": operands})
        assert exc_info.value.expected == 1
        assert exc_info.value.actual == len(operands)

    def test_operands_must_be_sequence(self):
        """Test that a scalar operand list is an error."""
        with pytest.raises(ParseError) as exc_info:
            parse({"All": True})
        assert exc_info.value.path == "$.All"

    def test_key_priority(self):
        """Test that All wins over Any, and Any over Type."""
        assert parse({"Any": [], "All": []}).node.operator is LogicalOperator.ALL
        assert parse({"Type": "x", "Any": []}).node.operator is LogicalOperator.ANY

    def test_nested_error_aborts_parse(self):
        """Test that a bad subtree fails the whole document with its path."""
        with pytest.raises(ParseError) as exc_info:
            parse({"All": [True, {"Any": [False, {"Unknown": 1}]}]})
        assert exc_info.value.path == "$.All[1].Any[1]"


class TestProcedureParsing:
    """Tests for predicate and action calls."""

    def test_predicate(self):
        """Test that Type alone is a predicate call."""
        node = parse({"Type": "always_true"}).node
        assert isinstance(node, Predicate)
        assert node.name == "always_true"
        assert not node.bound

    def test_action(self):
        """Test that Type with Params is an action call."""
        node = parse({"Type": "Accelerate", "Params": {"target": 10}}).node
        assert isinstance(node, Action)
        assert node.params == {"target": 10}

    def test_action_with_empty_params(self):
        """Test that a null Params is an action without arguments."""
        node = parse({"Type": "Stop", "Params": None}).node
        assert isinstance(node, Action)
        assert node.params == {}

    @pytest.mark.parametrize("name", ["", "  ", 3, None, ["a"]])
    def test_invalid_name(self, name):
        """Test that Type must be a non-empty string."""
        with pytest.raises(ParseError):
            parse({"Type": name})

    def test_params_must_be_map(self):
        """Test that Params must be a mapping."""
        with pytest.raises(ParseError) as exc_info:
            parse({"Type": "Accelerate", "Params": [1, 2]})
        assert exc_info.value.path == "$.Params"

    def test_unknown_name_is_deferred(self):
        """Test that names are not checked at parse time by default."""
        parser = ExpressionParser(StaticRegistry())
        assert parser.parse({"Type": "missing"}).node == Predicate("missing")

    def test_validate_names(self):
        """Test eager name validation."""
        parser = ExpressionParser(StaticRegistry({"ready": lambda: True}), validate_names=True)
        parser.parse({"Type": "ready"})
        with pytest.raises(ResolutionError) as exc_info:
            parser.parse({"All": [{"Type": "reddy"}]})
        assert exc_info.value.suggestion == "ready"

    def test_validate_names_requires_registry(self):
        """Test that eager validation needs a registry."""
        with pytest.raises(ValueError):
            ExpressionParser(validate_names=True)


class TestNumberLimits:
    """Tests for numbers that cannot be stored as finite floats."""

    def test_huge_integer(self):
        """Test that an integer too large for a float is a parse error."""
        with pytest.raises(ParseError) as exc_info:
            parse({"All": [10 ** 400]})
        assert exc_info.value.path == "$.All[0]"
        assert "not finite" in str(exc_info.value)

    def test_huge_integer_in_yaml(self):
        """Test that a 400-digit YAML integer is a parse error."""
        with pytest.raises(ParseError):
            ExpressionParser().parse_yaml("All: [" + "9" * 400 + "]")

    def test_validate_reports_huge_integer(self):
        """Test that validate() reports the overflow instead of raising."""
        ok, message = ExpressionParser().validate({"All": [10 ** 400]})
        assert ok is False
        assert "$.All[0]" in message

    @pytest.mark.parametrize("document", [
        "nan", "inf", "-Infinity", "1e999", "1_000", "0x10",
        float("nan"), float("inf"),
    ])
    def test_non_finite_or_loose_numbers(self, document):
        """Test that NaN, infinities and non-decimal spellings are rejected."""
        with pytest.raises(ParseError):
            parse(document)

    @pytest.mark.parametrize("document, expected", [
        ("+3", 3.0), ("-0.5", -0.5), (".25", 0.25), ("1e3", 1000.0), ("7.", 7.0),
    ])
    def test_decimal_strings(self, document, expected):
        """Test the accepted numeric spellings."""
        assert parse(document).node == Literal(expected)

    def test_parsed_literal_equals_input(self):
        """Test that every accepted number parses to a literal equal to itself."""
        for value in (0.0, 1.5, -2.0, 1e300):
            assert parse(value).node == Literal(value)


class TestUnsupportedForms:
    """Tests for forms without an operator context or evaluation rule."""

    def test_top_level_sequence(self):
        """Test that a bare sequence is rejected."""
        with pytest.raises(ParseError) as exc_info:
            parse([True, False])
        assert "sequence without operator context" in str(exc_info.value)

    def test_unrecognized_map(self):
        """Test that a map without known keys is rejected."""
        with pytest.raises(ParseError) as exc_info:
            parse({"Foo": [], "Bar": 1})
        assert "unrecognized expression form" in str(exc_info.value)
        assert "Foo" in str(exc_info.value)

    @pytest.mark.parametrize("key, node_type", [("Sequential", Sequential), ("Parallel", Parallel)])
    def test_composites_are_parsed(self, key, node_type):
        """Test that Sequential and Parallel parse their operands."""
        node = parse({key: [True, {"Type": "x"}]}).node
        assert isinstance(node, node_type)
        assert len(node.operands) == 2


class TestYamlParsing:
    """Tests for YAML input."""

    def test_parse_yaml(self):
        """Test parsing a YAML document."""
        parser = ExpressionParser()
        expression = parser.parse_yaml(
            "All:\n"
            "  - Any: [true, false]\n"
            "  - Type: always_true\n"
        )
        node = expression.node
        assert node.operator is LogicalOperator.ALL
        assert node.operands[0].node.operator is LogicalOperator.ANY
        assert node.operands[1].node == Predicate("always_true")

    def test_parse_file(self, tmp_path):
        """Test parsing a YAML file."""
        path = tmp_path / "condition.yaml"
        path.write_text("Not:\n  - Type: collision\n", encoding="utf-8")
        node = ExpressionParser().parse_file(path).node
        assert node.operator is LogicalOperator.NOT

    def test_invalid_yaml(self):
        """Test that malformed YAML is a parse error."""
        with pytest.raises(ParseError):
            ExpressionParser().parse_yaml("All: [true, false")

    def test_parsing_is_deterministic(self):
        """Test that the same document yields equal trees."""
        document = {"All": [{"Any": [True, {"Type": "a"}]}, {"Not": [{"Type": "b"}]}, 1.5]}
        assert parse(document) == parse(document)


class TestValidate:
    """Tests for ExpressionParser.validate."""

    def test_valid(self):
        """Test a valid document."""
        assert ExpressionParser().validate({"Any": [True]}) == (True, None)

    def test_invalid(self):
        """Test an invalid document."""
        ok, message = ExpressionParser().validate({"Not": []})
        assert ok is False
        assert "Not" in message

    def test_returns_expression(self):
        """Test that parse returns a handle."""
        assert isinstance(parse(True), Expression)
