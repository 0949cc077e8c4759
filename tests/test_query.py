import pytest

from bitabledb.core.models import SearchCmd
from bitabledb.core.query import render_predicate, render_value, translate


@pytest.mark.parametrize(
    ("predicates", "expected"),
    [
        ([], ""),
        ([SearchCmd("age", "=", 12)], "AND(CurrentValue.[age]=12)"),
        ([SearchCmd("name", "=", "zhangsan")], 'AND(CurrentValue.[name]="zhangsan")'),
        (
            [SearchCmd("age", ">", 10), SearchCmd("name", "=", "a")],
            'AND(CurrentValue.[age]>10,CurrentValue.[name]="a")',
        ),
    ],
)
def test_translate(predicates, expected):
    assert translate(predicates) == expected


def test_translate_keeps_predicate_order_for_three_clauses():
    expr = translate(
        [
            SearchCmd("a", "=", 1),
            SearchCmd("b", "!=", "x"),
            SearchCmd("c", "<=", 3),
        ]
    )

    assert expr == 'AND(CurrentValue.[a]=1,CurrentValue.[b]!="x",CurrentValue.[c]<=3)'


def test_translate_accepts_generators():
    expr = translate(SearchCmd(k, "=", 1) for k in ("x", "y"))

    assert expr == "AND(CurrentValue.[x]=1,CurrentValue.[y]=1)"


def test_render_value_uses_default_form_for_other_scalars():
    assert render_value(-7) == "-7"
    assert render_value(1.5) == "1.5"
    assert render_value(True) == "True"
    assert render_value("") == '""'


def test_render_predicate():
    assert render_predicate(SearchCmd("score", ">=", 90)) == "CurrentValue.[score]>=90"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (1e16, "10000000000000000"),
        (1e-7, "0.0000001"),
        (-2.25, "-2.25"),
        (100.0, "100.0"),
    ],
)
def test_render_value_writes_floats_in_plain_decimal(value, expected):
    assert render_value(value) == expected


def test_render_value_rejects_non_finite_floats():
    with pytest.raises(ValueError, match="non-finite"):
        render_value(float("nan"))


def test_render_value_escapes_quotes_and_backslashes():
    assert render_value('a"b') == '"a\\"b"'
    assert render_value("c:\\tmp") == '"c:\\\\tmp"'
    assert translate([SearchCmd("s", "=", 'say "hi"')]) == (
        'AND(CurrentValue.[s]="say \\"hi\\"")'
    )
