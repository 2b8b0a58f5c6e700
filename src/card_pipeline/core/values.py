"""Port value helpers — normalization of executor outputs."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

# Anything that may flow through a port.  Sequences and mappings nest freely.
PortValue = Union[str, int, float, bool, None, list[Any], tuple[Any, ...], dict[str, Any]]

# Output mapping of a single card after normalization.
Outputs = dict[str, Union[list[Any], tuple[Any, ...]]]


def is_sequence(value: Any) -> bool:
    """Return ``True`` for values that count as a port sequence.

    Only ``list`` and ``tuple`` qualify; strings and mappings are scalars
    from the pipeline's point of view.
    """
    return isinstance(value, (list, tuple))


def normalize_value(value: PortValue) -> list[Any] | tuple[Any, ...]:
    """Coerce a single output value to a sequence.

    Args:
        value: Raw value returned by an executor.

    Returns:
        *value* unchanged when it is already a sequence, otherwise a
        one-element list wrapping it.
    """
    if is_sequence(value):
        return value  # type: ignore[return-value]
    return [value]


def normalize_outputs(outputs: Mapping[str, PortValue]) -> Outputs:
    """Apply :func:`normalize_value` to every entry of an output mapping.

    Args:
        outputs: Output-port-name → raw value mapping.

    Returns:
        A new dict with every value coerced to a sequence.
    """
    return {name: normalize_value(value) for name, value in outputs.items()}


def unwrap_scalar(value: Any) -> Any:
    """Return the single element of a one-element sequence, else *value*.

    Normalized outputs arrive downstream as sequences, so a scalar such as a
    record count produced upstream reaches the next card as ``[7]``.
    """
    if is_sequence(value) and len(value) == 1:
        return value[0]
    return value


def to_number(value: Any, default: Any = None) -> Any:
    """Interpret *value* as a number, loosely.

    One-element sequences are unwrapped, booleans count as ``0``/``1`` and
    numeric strings are parsed.  Anything else, including ``NaN``, yields
    *default*.

    Args:
        value: Candidate value from an input port or property.
        default: Returned when *value* is not numeric.

    Returns:
        An ``int`` or ``float``, or *default*.
    """
    value = unwrap_scalar(value)
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return default if value != value else value
    if isinstance(value, str):
        text = value.strip()
        for parse in (int, float):
            try:
                number = parse(text)
            except ValueError:
                continue
            return default if number != number else number
    return default
