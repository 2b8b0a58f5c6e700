"""Generators — Faker-backed executors producing people, companies, numbers and more."""

from card_pipeline.executors.generators.logic import (
    company_generator,
    internet_generator,
    location_generator,
    number_generator,
    person_generator,
    phone_generator,
)

__all__ = [
    "company_generator",
    "internet_generator",
    "location_generator",
    "number_generator",
    "person_generator",
    "phone_generator",
]
