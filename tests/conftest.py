"""Shared fixtures for building small card graphs by hand."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import pytest

from card_pipeline.core.datatypes import Card, CardProperty, Connection, Port
from card_pipeline.core.registry import ExecutorRegistry

CardFactory = Callable[..., Card]
ConnectionFactory = Callable[[str, str, str, str], Connection]


@pytest.fixture()
def make_card() -> CardFactory:
    """Return a factory building cards with predictable port ids.

    Port ids follow ``<card>.in.<name>`` / ``<card>.out.<name>``.
    """

    def factory(
        card_id: str,
        definition_id: str = "test-def",
        inputs: Sequence[str] = (),
        outputs: Sequence[str] = (),
        properties: dict[str, object] | None = None,
    ) -> Card:
        return Card(
            id=card_id,
            definition_id=definition_id,
            name=card_id.upper(),
            input_ports=[Port(id=f"{card_id}.in.{n}", name=n, direction="input") for n in inputs],
            output_ports=[Port(id=f"{card_id}.out.{n}", name=n, direction="output") for n in outputs],
            properties=[
                CardProperty(name=name, type="string", value=value) for name, value in (properties or {}).items()
            ],
        )

    return factory


@pytest.fixture()
def make_connection() -> ConnectionFactory:
    """Return a factory connecting ``source.out.<output>`` to ``target.in.<input>``."""

    def factory(source: str, output: str, target: str, input_name: str) -> Connection:
        return Connection(
            id=f"{source}.{output}->{target}.{input_name}",
            source_card_id=source,
            source_port_id=f"{source}.out.{output}",
            target_card_id=target,
            target_port_id=f"{target}.in.{input_name}",
        )

    return factory


@pytest.fixture()
def clean_default_registry() -> ExecutorRegistry:
    """Yield a freshly discovered default registry and reset it afterwards."""
    ExecutorRegistry.reset()
    yield ExecutorRegistry.default()
    ExecutorRegistry.reset()
