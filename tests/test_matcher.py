"""Tests for match expression evaluation."""

import sys

import pytest

sys.path.insert(0, "src")

from spritehooks.engine.matcher import (
    evaluate_expression,
    evaluate_matches,
    parse_literal,
    values_equal,
)


class TestParseLiteral:
    """Tests for parse_literal()."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("true", True),
            ("false", False),
            ('"opened"', "opened"),
            ("'opened'", "opened"),
            ("42", 42),
            ("-3", -3),
            ("4.5", 4.5),
            ("opened", "opened"),
            ('  "padded"  ', "padded"),
        ],
    )
    def test_literals(self, text, expected):
        result = parse_literal(text)
        assert result == expected
        assert type(result) is type(expected)

    def test_quoted_true_stays_string(self):
        assert parse_literal('"true"') == "true"

    def test_nan_is_a_bare_string(self):
        assert parse_literal("nan") == "nan"

    def test_digit_separators_stay_strings(self):
        assert parse_literal("1_000") == "1_000"
        assert parse_literal("1_0.5") == "1_0.5"
        assert not values_equal(1000, parse_literal("1_000"))


class TestValuesEqual:
    """Tests for values_equal()."""

    def test_number_and_numeric_string(self):
        assert values_equal(42, "42")
        assert values_equal("42", 42)

    def test_integral_float(self):
        assert values_equal(42.0, 42)

    def test_bool_and_string(self):
        assert values_equal(True, "true")
        assert not values_equal(True, "True")

    def test_none_never_equal(self):
        assert not values_equal(None, None)
        assert not values_equal(None, "null")

    def test_containers_never_equal(self):
        assert not values_equal({"a": 1}, "{'a': 1}")
        assert not values_equal(["a"], "['a']")


class TestEvaluateExpression:
    """Tests for evaluate_expression()."""

    @pytest.fixture
    def context(self):
        return {
            "payload": {
                "action": "opened",
                "number": 7,
                "pull_request": {"draft": False, "user": {"login": "octocat"}},
            }
        }

    def test_equality(self, context):
        assert evaluate_expression('payload.action == "opened"', context)
        assert not evaluate_expression('payload.action == "closed"', context)

    def test_inequality(self, context):
        assert evaluate_expression('payload.action != "closed"', context)
        assert not evaluate_expression('payload.action != "opened"', context)

    def test_boolean_literal(self, context):
        assert evaluate_expression("payload.pull_request.draft == false", context)

    def test_numeric_literal(self, context):
        assert evaluate_expression("payload.number == 7", context)
        assert evaluate_expression('payload.number == "7"', context)

    def test_no_whitespace(self, context):
        assert evaluate_expression("payload.action==opened", context)

    def test_missing_path(self, context):
        assert not evaluate_expression('payload.missing == "x"', context)
        assert evaluate_expression('payload.missing != "x"', context)

    def test_missing_operator_is_false(self, context):
        assert not evaluate_expression("payload.action", context)

    def test_non_string_expression(self, context):
        assert not evaluate_expression(None, context)


class TestEvaluateMatches:
    """Tests for evaluate_matches()."""

    def test_empty_list_matches(self):
        assert evaluate_matches([], {"anything": 1})
        assert evaluate_matches(None, None)

    def test_all_must_pass(self):
        payload = {"action": "opened", "repository": {"name": "app"}}
        assert evaluate_matches(
            ['payload.action == "opened"', 'payload.repository.name == "app"'], payload
        )
        assert not evaluate_matches(
            ['payload.action == "opened"', 'payload.repository.name == "lib"'], payload
        )

    def test_invalid_expression_fails_whole_set(self):
        assert not evaluate_matches(['payload.action == "opened"', "garbage"], {"action": "opened"})

    def test_paths_are_rooted_at_payload(self):
        assert not evaluate_matches(['action == "opened"'], {"action": "opened"})
