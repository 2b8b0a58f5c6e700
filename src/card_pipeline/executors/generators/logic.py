"""Sample-data generator executors backed by Faker — no engine imports beyond helpers."""

from __future__ import annotations

import logging
from typing import Any

from faker import Faker

from card_pipeline.core.registry import executor
from card_pipeline.core.values import to_number

logger = logging.getLogger(__name__)

# ── Constants ─────────────────────────────────────────────────────────────

DEFAULT_COUNT = 10

AGE_RANGES: dict[str, tuple[int, int]] = {
    "child": (5, 12),
    "teen": (13, 19),
    "adult": (20, 65),
    "senior": (66, 90),
}
DEFAULT_AGE_RANGE = (18, 80)

COMPANY_SIZES: dict[str, tuple[int, int]] = {
    "startup": (1, 10),
    "small": (11, 50),
    "medium": (51, 500),
    "large": (501, 10000),
}
DEFAULT_COMPANY_SIZE = (1, 10000)

PHONE_FORMATS: frozenset[str] = frozenset({"local", "national", "international"})
INTERNET_DATA_TYPES: frozenset[str] = frozenset({"email", "url", "ip", "domain", "username"})
LOCATION_TYPES: frozenset[str] = frozenset({"address", "city", "coordinates", "zipcode"})

_fake = Faker()


def seed(value: int | None) -> None:
    """Seed the shared Faker instance; ``None`` restores random output."""
    _fake.seed_instance(value)
    logger.debug("Faker seeded with %r", value)


def resolve_count(inputs: dict[str, Any], properties: dict[str, Any]) -> int:
    """Pick the number of records to generate.

    The ``count`` input wins over the ``count`` property.  Zero, negative or
    non-numeric values fall back to ``DEFAULT_COUNT``.
    """
    for candidate in (inputs.get("count"), properties.get("count")):
        number = to_number(candidate)
        if number is not None and number >= 1:
            return int(number)
    return DEFAULT_COUNT


def _address() -> dict[str, str]:
    return {
        "street": _fake.street_address(),
        "city": _fake.city(),
        "state": _fake.state(),
        "zipCode": _fake.postcode(),
        "country": _fake.country(),
    }


# ── Executors ─────────────────────────────────────────────────────────────


@executor("personGenerator")
def person_generator(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """Generate people with optional email, phone and address."""
    count = resolve_count(inputs, properties)
    low, high = AGE_RANGES.get(str(properties.get("ageRange")), DEFAULT_AGE_RANGE)

    persons = []
    for _ in range(count):
        first_name = _fake.first_name()
        last_name = _fake.last_name()
        person: dict[str, Any] = {
            "id": _fake.uuid4(),
            "firstName": first_name,
            "lastName": last_name,
            "age": _fake.random_int(min=low, max=high),
            "gender": _fake.random_element(("female", "male")),
        }
        if properties.get("includeEmail"):
            person["email"] = f"{first_name}.{last_name}@{_fake.free_email_domain()}".lower()
        if properties.get("includePhone"):
            person["phone"] = _fake.phone_number()
        if properties.get("includeAddress"):
            person["address"] = _address()
        persons.append(person)

    return {"persons": persons}


@executor("companyGenerator")
def company_generator(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """Generate companies sized by the ``companySize`` property."""
    count = resolve_count(inputs, properties)
    low, high = COMPANY_SIZES.get(str(properties.get("companySize")), DEFAULT_COMPANY_SIZE)

    companies = []
    for _ in range(count):
        company: dict[str, Any] = {
            "id": _fake.uuid4(),
            "name": _fake.company(),
            "industry": _fake.bs().split()[0],
            "employees": _fake.random_int(min=low, max=high),
            "description": _fake.catch_phrase(),
        }
        if properties.get("includeAddress"):
            company["address"] = _address()
        if properties.get("includeWebsite"):
            company["website"] = _fake.url()
        companies.append(company)

    return {"companies": companies}


@executor("numberGenerator")
def number_generator(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """Generate integers, or floats rounded to ``precision`` digits, in ``[min, max]``.

    Raises:
        ValueError: If ``min`` is greater than ``max``.
    """
    count = resolve_count(inputs, properties)
    low = to_number(properties.get("min"), 1)
    high = to_number(properties.get("max"), 100)
    precision = int(to_number(properties.get("precision"), 0) or 0)
    if low > high:
        msg = f"min ({low}) must not be greater than max ({high})"
        raise ValueError(msg)

    if precision <= 0:
        numbers: list[int | float] = [_fake.random_int(min=int(low), max=int(high)) for _ in range(count)]
    else:
        numbers = [round(_fake.random.uniform(low, high), precision) for _ in range(count)]
    return {"numbers": numbers}


@executor("phoneGenerator")
def phone_generator(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """Generate phone numbers in the requested ``format``."""
    count = resolve_count(inputs, properties)
    fmt = str(properties.get("format"))

    def one() -> str:
        if fmt == "local":
            return _fake.numerify("###-####")
        if fmt == "national":
            return _fake.numerify("(###) ###-####")
        if fmt == "international":
            return f"{_fake.country_calling_code()} {_fake.numerify('### ### ####')}"
        return _fake.phone_number()

    return {"phones": [one() for _ in range(count)]}


@executor("internetGenerator")
def internet_generator(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """Generate emails, URLs, IPs, domains or usernames."""
    count = resolve_count(inputs, properties)
    data_type = str(properties.get("dataType"))
    provider = str(properties.get("provider") or "mixed")

    def one() -> str:
        if data_type == "url":
            return _fake.url()
        if data_type == "ip":
            return _fake.ipv4()
        if data_type == "domain":
            return _fake.domain_name()
        if data_type == "username":
            return _fake.user_name()
        if provider == "mixed":
            return _fake.email()
        return f"{_fake.user_name()}@{provider}"

    return {"data": [one() for _ in range(count)]}


@executor("locationGenerator")
def location_generator(inputs: dict[str, Any], properties: dict[str, Any]) -> dict[str, Any]:
    """Generate addresses, cities, coordinates or zip codes."""
    count = resolve_count(inputs, properties)
    location_type = str(properties.get("locationType"))
    include_coordinates = bool(properties.get("includeCoordinates"))

    locations = []
    for _ in range(count):
        location: dict[str, Any] = {"id": _fake.uuid4()}
        if location_type == "city":
            location.update(city=_fake.city(), state=_fake.state(), country=_fake.country())
        elif location_type == "coordinates":
            location.update(latitude=float(_fake.latitude()), longitude=float(_fake.longitude()))
        elif location_type == "zipcode":
            location["zipCode"] = _fake.postcode()
        else:
            location.update(_address())

        if include_coordinates and location_type != "coordinates":
            location.update(latitude=float(_fake.latitude()), longitude=float(_fake.longitude()))
        locations.append(location)

    return {"locations": locations}
