import asyncio

import pytest

from ecommerce_api.validation import (
    BODY,
    PATH,
    ID_RULES,
    PRODUCT_RULES,
    Rule,
    is_email,
    is_integer,
    is_not_empty,
    is_numeric,
    is_positive,
    min_length,
    run_rules,
    sanitized_body,
    trim,
)


def messages(rules, body=None, path=None) -> list[tuple[str, str]]:
    errors = asyncio.run(run_rules(rules, {BODY: body or {}, PATH: path or {}}))
    return [(error.field, error.message) for error in errors]


@pytest.mark.parametrize(
    "value, expected",
    [
        (100, True),
        ("100", True),
        ("-2.5", True),
        (".5", True),
        ("1e3", False),
        ("abc", False),
        (None, False),
        (True, False),
        ("1" + "0" * 400, False),
        (float("inf"), False),
    ],
)
def test_is_numeric(value, expected) -> None:
    assert is_numeric(value) is expected


@pytest.mark.parametrize(
    "value, expected",
    [(1, True), ("0.01", True), (0, False), (-3, False), ("abc", False), ("9" * 400, False)],
)
def test_is_positive(value, expected) -> None:
    assert is_positive(value) is expected


def test_small_predicates() -> None:
    assert is_integer("12") and not is_integer("1.5")
    assert is_email("a@b.io") and not is_email("a@b")
    assert is_not_empty("x") and not is_not_empty("")
    assert min_length(3)("abc") and not min_length(3)("ab")
    assert trim("  hi ") == "hi"
    assert trim(None) == ""


def test_valid_product_passes() -> None:
    assert messages(PRODUCT_RULES, {"name": "Mouse", "description": "Wireless", "price": 100}) == []


def test_missing_name_yields_one_entry_per_rule() -> None:
    result = messages(PRODUCT_RULES, {"description": "Wireless", "price": 100})
    assert result == [
        ("name", "name is required"),
        ("name", "name must be at least 3 characters"),
    ]


def test_whitespace_only_description_is_empty() -> None:
    result = messages(PRODUCT_RULES, {"name": "Mouse", "description": "   ", "price": 1})
    assert result == [("description", "description is required")]


def test_id_rule_reads_path() -> None:
    assert messages(ID_RULES, path={"id": "7"}) == []
    assert messages(ID_RULES, path={"id": "x7"}) == [("id", "id must be a number")]


def test_every_rule_is_evaluated() -> None:
    seen = []

    def recording(value):
        seen.append(value)
        return False

    rules = (
        Rule("a", recording, "a failed"),
        Rule("b", recording, "b failed"),
        Rule("c", recording, "c failed"),
    )
    assert [field for field, _ in messages(rules, {"a": 1, "b": 2, "c": 3})] == ["a", "b", "c"]
    assert sorted(seen) == [1, 2, 3]


def test_sanitized_body_keeps_declared_fields_only() -> None:
    body = {"name": "  Mouse ", "description": " Wireless", "price": "12", "extra": True}
    assert sanitized_body(PRODUCT_RULES, body) == {
        "name": "Mouse",
        "description": "Wireless",
        "price": "12",
    }
