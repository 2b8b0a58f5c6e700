"""Tests for the Faker-backed generator executors."""

from __future__ import annotations

import re
from collections.abc import Iterator

import pytest

from card_pipeline.executors.generators import logic
from card_pipeline.executors.generators.logic import (
    DEFAULT_COUNT,
    company_generator,
    internet_generator,
    location_generator,
    number_generator,
    person_generator,
    phone_generator,
    resolve_count,
)


@pytest.fixture(autouse=True)
def _seeded() -> Iterator[None]:
    logic.seed(99)
    yield
    logic.seed(None)


# ── Count resolution ──────────────────────────────────────────────────────


class TestResolveCount:
    """Tests for ``resolve_count``."""

    def test_input_wins_over_property(self) -> None:
        """A connected ``count`` arrives wrapped and still takes precedence."""
        assert resolve_count({"count": [3]}, {"count": 8}) == 3

    def test_property_used_without_input(self) -> None:
        """The property applies when no input is connected."""
        assert resolve_count({}, {"count": "4"}) == 4

    @pytest.mark.parametrize("count", [0, -2, "many", None])
    def test_invalid_counts_fall_back(self, count: object) -> None:
        """Zero, negative and non-numeric counts use the default."""
        assert resolve_count({}, {"count": count}) == DEFAULT_COUNT


# ── Numbers ───────────────────────────────────────────────────────────────


class TestNumberGenerator:
    """Tests for ``number_generator``."""

    def test_integers_within_bounds(self) -> None:
        """Precision 0 yields integers in ``[min, max]``."""
        numbers = number_generator({}, {"count": 50, "min": 5, "max": 9, "precision": 0})["numbers"]

        assert len(numbers) == 50
        assert all(isinstance(n, int) and 5 <= n <= 9 for n in numbers)

    def test_precision_rounds_floats(self) -> None:
        """Positive precision yields rounded floats."""
        numbers = number_generator({}, {"count": 20, "min": 0, "max": 1, "precision": 2})["numbers"]

        assert all(isinstance(n, float) and 0 <= n <= 1 for n in numbers)
        assert all(round(n, 2) == n for n in numbers)

    def test_min_above_max_raises(self) -> None:
        """Inverted bounds are an executor error."""
        with pytest.raises(ValueError, match="must not be greater"):
            number_generator({}, {"min": 10, "max": 1})

    def test_same_seed_same_numbers(self) -> None:
        """Seeding makes output reproducible."""
        logic.seed(5)
        first = number_generator({}, {"count": 5})
        logic.seed(5)
        assert number_generator({}, {"count": 5}) == first


# ── Records ───────────────────────────────────────────────────────────────


class TestPersonGenerator:
    """Tests for ``person_generator``."""

    def test_optional_fields_follow_flags(self) -> None:
        """Email and address appear only when requested."""
        persons = person_generator({}, {"count": 3, "includeEmail": True, "includeAddress": False})["persons"]

        assert len(persons) == 3
        for person in persons:
            assert "@" in person["email"]
            assert "address" not in person
            assert "phone" not in person

    def test_age_range(self) -> None:
        """Ages respect the selected range."""
        persons = person_generator({}, {"count": 25, "ageRange": "teen"})["persons"]
        assert all(13 <= p["age"] <= 19 for p in persons)


class TestCompanyGenerator:
    """Tests for ``company_generator``."""

    def test_size_and_website(self) -> None:
        """Employee counts follow ``companySize``; websites are optional."""
        companies = company_generator({}, {"count": 5, "companySize": "small", "includeWebsite": True})["companies"]

        assert all(11 <= c["employees"] <= 50 for c in companies)
        assert all(c["website"].startswith("http") for c in companies)


class TestPhoneGenerator:
    """Tests for ``phone_generator``."""

    def test_local_format(self) -> None:
        """Local numbers look like ``###-####``."""
        phones = phone_generator({}, {"count": 4, "format": "local"})["phones"]
        assert all(re.fullmatch(r"\d{3}-\d{4}", p) for p in phones)


class TestInternetGenerator:
    """Tests for ``internet_generator``."""

    def test_email_with_provider(self) -> None:
        """A fixed provider becomes the email domain."""
        emails = internet_generator({}, {"count": 3, "dataType": "email", "provider": "example.org"})["data"]
        assert all(e.endswith("@example.org") for e in emails)

    def test_ip_addresses(self) -> None:
        """IP data is dotted quad."""
        ips = internet_generator({}, {"count": 3, "dataType": "ip"})["data"]
        assert all(len(ip.split(".")) == 4 for ip in ips)


class TestLocationGenerator:
    """Tests for ``location_generator``."""

    def test_coordinates_only(self) -> None:
        """The coordinates type yields float latitude and longitude."""
        (location,) = location_generator({}, {"count": 1, "locationType": "coordinates"})["locations"]

        assert -90 <= location["latitude"] <= 90
        assert -180 <= location["longitude"] <= 180
        assert "city" not in location

    def test_city_with_coordinates(self) -> None:
        """``includeCoordinates`` adds coordinates to other types."""
        (location,) = location_generator({}, {"count": 1, "locationType": "city", "includeCoordinates": True})[
            "locations"
        ]

        assert {"city", "state", "country", "latitude", "longitude"} <= set(location)
