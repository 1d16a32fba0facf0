"""
Declarative request validation.

Each endpoint owns an ordered tuple of ``Rule`` entries. ``validate(rules)``
turns such a table into a FastAPI dependency: every rule is evaluated, the
failures are collected in declaration order, and a single
``RequestValidationFailed`` is raised when there is at least one. A field
with two failing rules contributes two entries.
"""

import asyncio
import json
import math
import re
from typing import Any, Callable, Mapping, NamedTuple, Optional

from fastapi import Request

from .errors import RequestValidationFailed
from .schemas import FieldError

Predicate = Callable[[Any], bool]
Sanitizer = Callable[[Any], Any]

BODY = "body"
PATH = "path"
QUERY = "query"

_NUMERIC_RE = re.compile(r"^[+-]?([0-9]*[.])?[0-9]+$")
_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class Rule(NamedTuple):
    field: str
    check: Predicate
    message: str
    location: str = BODY
    sanitize: Optional[Sanitizer] = None


def trim(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (dict, list)):
        return value
    return str(value).strip()


def _as_text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


def is_not_empty(value: Any) -> bool:
    return _as_text(value) != ""


def min_length(length: int) -> Predicate:
    def check(value: Any) -> bool:
        return len(_as_text(value)) >= length

    return check


def is_numeric(value: Any) -> bool:
    text = _as_text(value)
    # Digit strings past the float range parse to inf.
    return bool(_NUMERIC_RE.match(text)) and math.isfinite(float(text))


def is_integer(value: Any) -> bool:
    return bool(_INTEGER_RE.match(_as_text(value)))


def is_email(value: Any) -> bool:
    return bool(_EMAIL_RE.match(_as_text(value)))


def is_positive(value: Any) -> bool:
    if not is_numeric(value):
        return False
    return float(_as_text(value)) > 0


PRODUCT_RULES: tuple[Rule, ...] = (
    Rule("name", is_not_empty, "name is required", sanitize=trim),
    Rule("name", min_length(3), "name must be at least 3 characters", sanitize=trim),
    Rule("description", is_not_empty, "description is required", sanitize=trim),
    Rule("price", is_numeric, "price must be a number"),
    Rule("price", is_positive, "price must be greater than 0"),
)

ID_RULES: tuple[Rule, ...] = (
    Rule("id", is_integer, "id must be a number", location=PATH),
)

USER_RULES: tuple[Rule, ...] = (
    Rule("name", is_not_empty, "name is required", sanitize=trim),
    Rule("email", is_email, "email must be a valid email address", sanitize=trim),
    Rule("status", is_not_empty, "status is required", sanitize=trim),
    Rule("role", is_not_empty, "role is required", sanitize=trim),
)


async def read_json_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    payload = json.loads(raw)
    return payload if isinstance(payload, dict) else {}


def _source_for(rule: Rule, sources: Mapping[str, Mapping[str, Any]]) -> Mapping[str, Any]:
    return sources.get(rule.location, {})


async def _run_rule(rule: Rule, sources: Mapping[str, Mapping[str, Any]]) -> Optional[FieldError]:
    value = _source_for(rule, sources).get(rule.field)
    if rule.sanitize is not None:
        value = rule.sanitize(value)
    if rule.check(value):
        return None
    return FieldError(field=rule.field, message=rule.message)


async def run_rules(rules: tuple[Rule, ...], sources: Mapping[str, Mapping[str, Any]]) -> list[FieldError]:
    results = await asyncio.gather(*(_run_rule(rule, sources) for rule in rules))
    return [error for error in results if error is not None]


def sanitized_body(rules: tuple[Rule, ...], body: Mapping[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for rule in rules:
        if rule.location != BODY or rule.field in cleaned:
            continue
        value = body.get(rule.field)
        cleaned[rule.field] = rule.sanitize(value) if rule.sanitize is not None else value
    return cleaned


def validate(rules: tuple[Rule, ...]):
    """Build a dependency that enforces ``rules`` and returns the cleaned body fields."""

    needs_body = any(rule.location == BODY for rule in rules)

    async def dependency(request: Request) -> dict[str, Any]:
        body = await read_json_body(request) if needs_body else {}
        sources = {
            BODY: body,
            PATH: request.path_params,
            QUERY: request.query_params,
        }
        errors = await run_rules(rules, sources)
        if errors:
            raise RequestValidationFailed(errors)
        return sanitized_body(rules, body)

    return dependency
