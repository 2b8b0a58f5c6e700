"""Pipeline — aggregate root holding cards and connections, with graph edits."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from card_pipeline.core.datatypes import Card, Connection, ExecutionResult, Position
from card_pipeline.core.exceptions import ValidationError
from card_pipeline.core.graph import GraphModel

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Pipeline:
    """Cards plus connections and metadata; the unit of save, load and execute.

    Every mutating method keeps the ports' ``connected`` flags consistent with
    the connection list and bumps ``updated_at``.

    Attributes:
        id: Pipeline id.
        name: Human-readable name.
        description: Free text.
        cards: Cards in insertion order.
        connections: Connections in insertion order.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "New Pipeline"
    description: str = ""
    cards: list[Card] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    def graph(self) -> GraphModel:
        """Return a ``GraphModel`` snapshot of the current cards and connections."""
        return GraphModel(self.cards, self.connections)

    def card(self, card_id: str) -> Card | None:
        """Look up a card by id."""
        return next((c for c in self.cards if c.id == card_id), None)

    def add_card(self, card: Card) -> Card:
        """Append *card* to the pipeline.

        Raises:
            ValidationError: If a card with the same id already exists.
        """
        if self.card(card.id) is not None:
            msg = f"Card '{card.id}' already exists in pipeline '{self.name}'"
            raise ValidationError(msg)
        self.cards.append(card)
        self._touch()
        logger.debug("Added card '%s' (%s)", card.name, card.id)
        return card

    def connect(
        self,
        source_card_id: str,
        source_port_id: str,
        target_card_id: str,
        target_port_id: str,
    ) -> Connection:
        """Create a connection from an output port to an input port.

        Raises:
            ValidationError: If an endpoint does not exist, the connection
                would loop a card onto itself, or the input port is already
                connected.
        """
        source = self.card(source_card_id)
        target = self.card(target_card_id)
        if source is None or target is None:
            msg = f"Cannot connect unknown card '{source_card_id if source is None else target_card_id}'"
            raise ValidationError(msg)
        if source_card_id == target_card_id:
            msg = f"Card '{source.name}' cannot be connected to itself"
            raise ValidationError(msg)

        source_port = source.output_port(source_port_id)
        target_port = target.input_port(target_port_id)
        if source_port is None:
            msg = f"Card '{source.name}' has no output port '{source_port_id}'"
            raise ValidationError(msg)
        if target_port is None:
            msg = f"Card '{target.name}' has no input port '{target_port_id}'"
            raise ValidationError(msg)
        if any(c.target_card_id == target_card_id and c.target_port_id == target_port_id for c in self.connections):
            msg = f"Input port '{target_port.name}' of card '{target.name}' is already connected"
            raise ValidationError(msg)

        connection = Connection(
            id=str(uuid.uuid4()),
            source_card_id=source_card_id,
            source_port_id=source_port_id,
            target_card_id=target_card_id,
            target_port_id=target_port_id,
        )
        self.connections.append(connection)
        source_port.connected = True
        target_port.connected = True
        self._touch()
        return connection

    def connect_by_name(self, source: Card, output_name: str, target: Card, input_name: str) -> Connection:
        """Connect two cards using port names instead of ids.

        Raises:
            ValidationError: If either port name is unknown.
        """
        source_port = next((p for p in source.output_ports if p.name == output_name), None)
        target_port = next((p for p in target.input_ports if p.name == input_name), None)
        if source_port is None or target_port is None:
            missing = output_name if source_port is None else input_name
            msg = f"Unknown port name '{missing}'"
            raise ValidationError(msg)
        return self.connect(source.id, source_port.id, target.id, target_port.id)

    def disconnect(self, connection_id: str) -> None:
        """Remove a connection; unknown ids are ignored."""
        self.remove([connection_id])

    def remove(self, item_ids: Iterable[str]) -> None:
        """Delete cards and connections by id.

        Connections touching a deleted card are removed with it.

        Args:
            item_ids: Mixed card and connection ids.
        """
        doomed = set(item_ids)
        self.cards = [c for c in self.cards if c.id not in doomed]
        self.connections = [
            c
            for c in self.connections
            if c.id not in doomed and c.source_card_id not in doomed and c.target_card_id not in doomed
        ]
        self.refresh_connected_flags()
        self._touch()

    def set_property(self, card_id: str, name: str, value: Any) -> None:
        """Change a card property after checking the value against its type.

        Raises:
            ValidationError: If the card or property is unknown or the value
                does not fit.
        """
        card = self.card(card_id)
        if card is None:
            msg = f"Unknown card '{card_id}'"
            raise ValidationError(msg)
        prop = card.get_property(name)
        if prop is None:
            msg = f"Card '{card.name}' has no property '{name}'"
            raise ValidationError(msg)
        prop.check(value)
        prop.value = value
        self._touch()

    def move_card(self, card_id: str, x: float, y: float) -> None:
        """Update a card's canvas position."""
        card = self.card(card_id)
        if card is not None:
            card.position = Position(x=x, y=y)
            self._touch()

    def refresh_connected_flags(self) -> None:
        """Recompute every port's ``connected`` flag from the connection list."""
        sources = {(c.source_card_id, c.source_port_id) for c in self.connections}
        targets = {(c.target_card_id, c.target_port_id) for c in self.connections}
        for card in self.cards:
            for port in card.input_ports:
                port.connected = (card.id, port.id) in targets
            for port in card.output_ports:
                port.connected = (card.id, port.id) in sources

    def apply_results(self, results: Iterable[ExecutionResult]) -> None:
        """Copy run outputs onto port values for previewing.

        Each output port receives its normalized output; each input port fed
        by that output receives the same value.

        Args:
            results: Results returned by ``PipelineEngine.execute``.
        """
        for result in results:
            card = self.card(result.card_id)
            if card is None:
                continue
            for port in card.output_ports:
                port.value = result.outputs.get(port.name)
                if port.name not in result.outputs:
                    continue
                for connection in self.connections:
                    if connection.source_card_id != card.id or connection.source_port_id != port.id:
                        continue
                    target = self.card(connection.target_card_id)
                    target_port = target.input_port(connection.target_port_id) if target else None
                    if target_port is not None:
                        target_port.value = port.value

    def _touch(self) -> None:
        self.updated_at = _now()
