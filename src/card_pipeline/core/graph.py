"""GraphModel — read-only index over cards and connections."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from card_pipeline.core.datatypes import Card, Connection, Port


class GraphModel:
    """Answers the structural queries the scheduler and resolver need.

    The model indexes a snapshot of cards and connections; it never mutates
    them.  Only connections whose source and target ports both resolve feed
    ``dependencies`` and ``incoming_connection``; the rest are reported by
    ``dangling_connections`` and otherwise have no effect.

    Args:
        cards: Cards in caller order.  Duplicate ids keep the first card.
        connections: Connections in caller order.
    """

    def __init__(self, cards: Iterable[Card], connections: Iterable[Connection]) -> None:
        self._cards: dict[str, Card] = {}
        for card in cards:
            self._cards.setdefault(card.id, card)
        self._connections = list(connections)
        self._incoming: dict[str, list[Connection]] = defaultdict(list)
        for connection in self._connections:
            if self.source_port(connection) is None or self.target_port(connection) is None:
                continue
            self._incoming[connection.target_card_id].append(connection)

    @property
    def cards(self) -> list[Card]:
        """Return the indexed cards in input order."""
        return list(self._cards.values())

    def card(self, card_id: str) -> Card | None:
        """Look up a card by id."""
        return self._cards.get(card_id)

    def dependencies(self, card_id: str) -> list[str]:
        """Return ids of cards feeding *card_id*, in connection order, without repeats.

        Args:
            card_id: The dependent card.

        Returns:
            Source card ids of every resolved connection targeting *card_id*.
        """
        seen: dict[str, None] = {}
        for connection in self._incoming.get(card_id, []):
            seen.setdefault(connection.source_card_id, None)
        return list(seen)

    def incoming_connection(self, card_id: str, port_id: str) -> Connection | None:
        """Return the connection feeding an input port.

        When several connections target the same port the first one wins.

        Args:
            card_id: Target card id.
            port_id: Target input port id.

        Returns:
            The feeding connection, or ``None`` if the port is unconnected.
        """
        for connection in self._incoming.get(card_id, []):
            if connection.target_port_id == port_id:
                return connection
        return None

    def source_port(self, connection: Connection) -> Port | None:
        """Return the output port a connection starts from, or ``None`` if dangling."""
        card = self._cards.get(connection.source_card_id)
        if card is None:
            return None
        return card.output_port(connection.source_port_id)

    def target_port(self, connection: Connection) -> Port | None:
        """Return the input port a connection ends at, or ``None`` if dangling."""
        card = self._cards.get(connection.target_card_id)
        if card is None:
            return None
        return card.input_port(connection.target_port_id)

    def dangling_connections(self) -> list[Connection]:
        """Return connections with at least one endpoint that does not resolve."""
        return [
            c for c in self._connections if self.source_port(c) is None or self.target_port(c) is None
        ]
