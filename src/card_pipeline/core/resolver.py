"""Data-flow resolver — assembles a card's inputs from staged upstream outputs."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from card_pipeline.core.datatypes import Card
from card_pipeline.core.graph import GraphModel

logger = logging.getLogger(__name__)


def resolve_inputs(
    card: Card,
    graph: GraphModel,
    staged: Mapping[str, Mapping[str, Any]],
) -> dict[str, Any]:
    """Build the ``input-port-name → value`` mapping for *card*.

    An input receives a value only when a connection feeds it, the source
    card has staged outputs, and the source port's *name* is one of those
    outputs.  Any gap leaves the input out; the executor falls back to its
    own default.  Values held on unconnected ports are never injected.

    Args:
        card: The card about to execute.
        graph: Index of the pipeline's cards and connections.
        staged: Card id → normalized outputs of cards that already ran.

    Returns:
        Resolved inputs keyed by the receiving port's name.
    """
    inputs: dict[str, Any] = {}
    for port in card.input_ports:
        connection = graph.incoming_connection(card.id, port.id)
        if connection is None:
            continue

        upstream = staged.get(connection.source_card_id)
        if upstream is None:
            logger.debug("Input '%s' of card %s: source %s has no outputs", port.name, card.id, connection.source_card_id)
            continue

        source_port = graph.source_port(connection)
        if source_port is None or source_port.name not in upstream:
            logger.debug("Input '%s' of card %s: source port %s unresolved", port.name, card.id, connection.source_port_id)
            continue

        inputs[port.name] = upstream[source_port.name]
    return inputs
