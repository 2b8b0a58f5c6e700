"""Tests for output normalization and loose number parsing."""

from __future__ import annotations

import pytest

from card_pipeline.core.values import normalize_outputs, normalize_value, to_number, unwrap_scalar


class TestNormalization:
    """Every output value becomes a sequence."""

    def test_scalar_is_wrapped(self) -> None:
        """``{x: 5}`` becomes ``{x: [5]}``."""
        assert normalize_outputs({"x": 5}) == {"x": [5]}

    def test_list_passes_through_unchanged(self) -> None:
        """An existing list is returned as the same object."""
        numbers = [1, 2]
        normalized = normalize_outputs({"x": numbers})

        assert normalized == {"x": [1, 2]}
        assert normalized["x"] is numbers

    def test_tuple_is_a_sequence(self) -> None:
        """Tuples are sequences too and are not re-wrapped."""
        assert normalize_value((1, 2)) == (1, 2)

    @pytest.mark.parametrize("value", ["text", {"a": 1}, None, True])
    def test_non_sequences_are_wrapped(self, value: object) -> None:
        """Strings, mappings, ``None`` and booleans are scalars."""
        assert normalize_value(value) == [value]


class TestLooseNumbers:
    """``to_number`` and ``unwrap_scalar`` helpers."""

    def test_unwrap_single_element(self) -> None:
        """One-element sequences unwrap to their element."""
        assert unwrap_scalar([7]) == 7
        assert unwrap_scalar([1, 2]) == [1, 2]

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(3, 3), ("10", 10), ("2.5", 2.5), ([7], 7), (True, 1), ("abc", None), (None, None), ({"a": 1}, None)],
    )
    def test_to_number(self, value: object, expected: object) -> None:
        """Numbers, numeric strings and wrapped numbers parse; the rest do not."""
        assert to_number(value) == expected

    def test_nan_falls_back_to_default(self) -> None:
        """``NaN`` counts as non-numeric."""
        assert to_number(float("nan"), 5) == 5
