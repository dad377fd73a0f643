import pytest

from mondo.builders.sorting import parse_sort, sort_field


@pytest.mark.parametrize(
    "field, expected",
    [
        ("age", ("age", 1)),
        ("+age", ("age", 1)),
        ("-age", ("age", -1)),
        ("$textScore:score", ("score", {"$meta": "textScore"})),
        ("$textScore:-score", ("score", {"$meta": "textScore"})),
        ("$unknown:age", ("age", 1)),
        ("$age", ("$age", 1)),
        ("$:age", ("$:age", 1)),
        ("$textScore:", ("$textScore:", 1)),
    ],
)
def test_sort_field(field, expected):
    assert sort_field(field) == expected


@pytest.mark.parametrize("field", ["", "-", "+", "$textScore:-"])
def test_sort_field_without_name_is_skipped(field):
    assert sort_field(field) is None


def test_parse_sort_preserves_order():
    assert parse_sort("-age", "name", "$textScore:score") == [
        ("age", -1),
        ("name", 1),
        ("score", {"$meta": "textScore"}),
    ]


def test_parse_sort_skips_empty_fields():
    assert parse_sort("", "-age", "-") == [("age", -1)]


@pytest.mark.parametrize("field", ["age", "created_at", "a.b"])
def test_negated_field_inverts_direction(field):
    key, direction = sort_field(field)
    assert sort_field(f"-{field}") == (key, -direction)
