import pytest

from parsing.errors import PluralExpressionError
from parsing.plural_rule import (
    DEFAULT_RULE,
    BinaryOp,
    Literal,
    Ternary,
    Variable,
    compile_expression,
    parse_plural_forms,
)

SLAVIC = "nplurals=3; plural=(n==1 ? 0 : n%10>=2 && n%10<=4 && (n%100<10 || n%100>=20) ? 1 : 2);"


def test_default_rule():
    assert DEFAULT_RULE.evaluate(0) == 1
    assert DEFAULT_RULE.evaluate(1) == 0
    assert DEFAULT_RULE.evaluate(2) == 1
    assert DEFAULT_RULE.nplurals == 2


def test_missing_header_uses_default_rule():
    assert parse_plural_forms(None) is DEFAULT_RULE
    assert parse_plural_forms("  ") is DEFAULT_RULE


def test_slavic_rule():
    rule = parse_plural_forms(SLAVIC)
    assert rule.nplurals == 3
    assert [rule(n) for n in (1, 2, 5, 22, 12, 111, 0)] == [0, 1, 2, 1, 2, 2, 2]


def test_boolean_expression_yields_zero_or_one():
    rule = parse_plural_forms("nplurals=2; plural=(n != 1);")
    assert rule(1) == 0
    assert rule(0) == 1
    assert rule(7) == 1
    assert compile_expression("n > 1 && n < 5")(3) == 1
    assert compile_expression("!n")(0) == 1
    assert compile_expression("!n")(4) == 0


@pytest.mark.parametrize(
    "expr, n, expected",
    [
        ("1 + 2 * 3", 0, 7),
        ("(1 + 2) * 3", 0, 9),
        ("n - 1 - 1", 5, 3),
        ("n / 2", 7, 3),
        ("n % 3", 7, 1),
        ("1 < 2 == 1", 0, 1),
        ("0 || 1 && 0", 0, 0),
        ("n == 0 ? 0 : n == 1 ? 1 : 2", 1, 1),
        ("n == 0 ? 0 : n == 1 ? 1 : 2", 9, 2),
        ("!n == 0", 3, 1),
    ],
)
def test_precedence_and_associativity(expr, n, expected):
    assert compile_expression(expr)(n) == expected


def test_c_integer_division_and_remainder():
    assert compile_expression("(0 - 7) / 2")(0) == -3
    assert compile_expression("(0 - 7) % 2")(0) == -1


def test_header_without_trailing_semicolon_and_extra_spaces():
    rule = parse_plural_forms("  nplurals = 2 ;  plural = n>1  ")
    assert rule.expression == "n>1"
    assert rule(2) == 1


def test_syntax_tree_shape():
    rule = compile_expression("n == 1 ? 0 : 1")
    assert rule.tree == Ternary(BinaryOp("==", Variable(), Literal(1)), Literal(0), Literal(1))


def test_malformed_header_reports_raw_text():
    with pytest.raises(PluralExpressionError) as info:
        parse_plural_forms("plural=n != 1")
    assert info.value.expression == "plural=n != 1"


@pytest.mark.parametrize(
    "expr, offending",
    [
        ("n != 1 ; exec()", ";"),
        ("n = 1", "="),
        ("foo", "foo"),
        ("n &", "&"),
    ],
)
def test_invalid_tokens_rejected(expr, offending):
    with pytest.raises(PluralExpressionError) as info:
        compile_expression(expr)
    assert offending in info.value.expression


@pytest.mark.parametrize("expr", ["", "(n", "n ? 1", "n +", "n 1", "()"])
def test_incomplete_expressions_rejected(expr):
    with pytest.raises(PluralExpressionError):
        compile_expression(expr)


def test_division_by_zero_at_evaluation():
    rule = compile_expression("n / (n - 1)")
    assert rule(3) == 1
    with pytest.raises(PluralExpressionError):
        rule(1)


def test_overlong_expression_rejected():
    with pytest.raises(PluralExpressionError):
        compile_expression("n" + " + n" * 500)
