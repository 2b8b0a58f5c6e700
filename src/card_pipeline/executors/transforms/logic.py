"""Array filter and transform executors."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from card_pipeline.core.registry import executor
from card_pipeline.core.values import is_sequence, to_number

FILTER_OPERATORS: frozenset[str] = frozenset({"equals", "contains", "greater", "less", "exists"})
TRANSFORM_OPERATIONS: frozenset[str] = frozenset({"pluck", "groupBy", "sort"})


def field_value(item: Any, field: str) -> Any:
    """Return ``item[field]`` for mappings; scalar items stand for themselves."""
    if isinstance(item, Mapping):
        return item.get(field)
    return item


def matches(candidate: Any, operator: str, value: Any) -> bool:
    """Evaluate a single filter comparison.

    Numeric comparisons treat non-numeric operands as never matching.
    Unknown operators match everything.
    """
    if operator == "equals":
        return candidate == value
    if operator == "contains":
        return str(value).lower() in str(candidate).lower()
    if operator in ("greater", "less"):
        left, right = to_number(candidate), to_number(value)
        if left is None or right is None:
            return False
        return left > right if operator == "greater" else left < right
    if operator == "exists":
        return candidate is not None
    return True


@executor("filterGenerator")
def filter_array(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """Keep the items of the ``array`` input whose ``field`` satisfies ``operator value``."""
    array = inputs.get("array")
    if not is_sequence(array):
        return {"filtered": []}

    field = str(properties.get("field", ""))
    operator = str(properties.get("operator", ""))
    value = properties.get("value")
    return {"filtered": [item for item in array if matches(field_value(item, field), operator, value)]}


def group_by(data: list[Any], field: str) -> list[dict[str, Any]]:
    """Group mapping items by ``str(item[field])``, in first-seen order."""
    groups: dict[str, list[Any]] = {}
    for item in data:
        if isinstance(item, Mapping):
            groups.setdefault(str(item.get(field)), []).append(item)
    return [{"group": key, "items": items, "count": len(items)} for key, items in groups.items()]


@executor("transformGenerator")
def transform_array(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """Pluck a field, group by a field, or sort by a field over the ``data`` input.

    Sorting compares string forms and is stable; unknown operations pass
    the data through.
    """
    data = inputs.get("data")
    if not is_sequence(data):
        return {"transformed": []}

    operation = str(properties.get("operation", ""))
    field = str(properties.get("field", ""))

    if operation == "pluck":
        plucked = (item.get(field) for item in data if isinstance(item, Mapping))
        transformed: list[Any] = [value for value in plucked if value is not None]
    elif operation == "groupBy":
        transformed = group_by(list(data), field)
    elif operation == "sort":
        transformed = sorted(data, key=lambda item: str(field_value(item, field)))
    else:
        transformed = list(data)
    return {"transformed": transformed}
