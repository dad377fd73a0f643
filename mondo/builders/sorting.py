"""The sort-field mini-language used by every builder's `sort()` setter.

    field := ['+' | '-'] name | '$' kind ':' name

`"age"` and `"+age"` sort ascending, `"-age"` sorts descending, and `"$textScore:score"` sorts on the text search
relevance of the match, projected as `score`.
"""


TEXT_SCORE = "textScore"

type SortKey = tuple[str, int | dict[str, str]]


def sort_field(field: str) -> SortKey | None:
    """Parses a single sort field, returning `None` when no field name remains after the prefixes are removed."""
    kind = ""
    if field.startswith("$"):
        separator = field.find(":")
        if 1 < separator < len(field) - 1:
            kind, field = field[1:separator], field[separator + 1:]

    direction = 1
    if field.startswith("-"):
        direction, field = -1, field[1:]
    elif field.startswith("+"):
        field = field[1:]

    if not field:
        return None

    if kind == TEXT_SCORE:
        return field, {"$meta": kind}

    return field, direction


def parse_sort(*fields: str) -> list[SortKey]:
    return [key for field in fields if (key := sort_field(field)) is not None]
