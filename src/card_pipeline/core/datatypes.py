"""Shared value objects — ports, cards, connections, definitions and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from card_pipeline.core.exceptions import ValidationError
from card_pipeline.core.values import Outputs, PortValue

PortDirection = Literal["input", "output"]
PropertyType = Literal["string", "number", "boolean", "select", "array"]
ExecutionStatus = Literal["running", "completed", "error"]

PROPERTY_TYPES: frozenset[str] = frozenset({"string", "number", "boolean", "select", "array"})


@dataclass
class Port:
    """A named, directional slot on a card through which values flow.

    Attributes:
        id: Unique port id.
        name: Port name; data flow between cards is keyed by this name.
        direction: ``"input"`` or ``"output"``.
        data_type: Free-form type tag (``"number"``, ``"array"``, ...).
        connected: Whether any connection references this port.
        value: Current value (last received or produced).
        default_value: Value seeded from the card definition.
    """

    id: str
    name: str
    direction: PortDirection
    data_type: str = "any"
    connected: bool = False
    value: PortValue = None
    default_value: PortValue = None


@dataclass
class CardProperty:
    """A typed configuration value on a card."""

    name: str
    type: PropertyType
    value: Any = None
    options: list[str] | None = None
    description: str = ""

    def check(self, value: Any) -> None:
        """Validate *value* against this property's type.

        Args:
            value: Candidate value.

        Raises:
            ValidationError: If the value does not fit the property type.
        """
        ok: bool
        if self.type == "number":
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        elif self.type == "boolean":
            ok = isinstance(value, bool)
        elif self.type == "array":
            ok = isinstance(value, (list, tuple))
        elif self.type == "select":
            ok = self.options is None or value in self.options
        else:
            ok = isinstance(value, str)
        if not ok:
            expected = f"one of {self.options}" if self.type == "select" else f"a {self.type}"
            msg = f"Property '{self.name}' must be {expected}, got {value!r}"
            raise ValidationError(msg)


@dataclass(frozen=True)
class Position:
    """Canvas position of a card; irrelevant to execution."""

    x: float = 0.0
    y: float = 0.0


@dataclass
class Card:
    """A graph node bound to a ``CardDefinition``, holding its own port and property state."""

    id: str
    definition_id: str
    name: str
    position: Position = field(default_factory=Position)
    input_ports: list[Port] = field(default_factory=list)
    output_ports: list[Port] = field(default_factory=list)
    properties: list[CardProperty] = field(default_factory=list)
    is_selected: bool = False

    def input_port(self, port_id: str) -> Port | None:
        """Return the input port with *port_id*, or ``None``."""
        return next((p for p in self.input_ports if p.id == port_id), None)

    def output_port(self, port_id: str) -> Port | None:
        """Return the output port with *port_id*, or ``None``."""
        return next((p for p in self.output_ports if p.id == port_id), None)

    def get_property(self, name: str) -> CardProperty | None:
        """Return the property called *name*, or ``None``."""
        return next((p for p in self.properties if p.name == name), None)

    def property_values(self) -> dict[str, Any]:
        """Return the card's properties as a name → value mapping."""
        return {prop.name: prop.value for prop in self.properties}


@dataclass(frozen=True)
class Connection:
    """A directed edge from one card's output port to another card's input port."""

    id: str
    source_card_id: str
    source_port_id: str
    target_card_id: str
    target_port_id: str


@dataclass(frozen=True)
class PortDefinition:
    """Port shape declared by a card definition."""

    name: str
    data_type: str = "any"
    default_value: PortValue = None


@dataclass(frozen=True)
class CardDefinition:
    """Immutable template shared by every card instantiated from it.

    Attributes:
        id: Definition id referenced by ``Card.definition_id``.
        name: Display name given to new cards.
        executor: Registry name of the computation function.
        description: Human-readable description.
        category: Library grouping (``"Generators"``, ``"Transforms"``, ...).
        input_ports: Declared input port shapes.
        output_ports: Declared output port shapes.
        properties: Default property set copied into each new card.
    """

    id: str
    name: str
    executor: str
    description: str = ""
    category: str = "General"
    input_ports: tuple[PortDefinition, ...] = ()
    output_ports: tuple[PortDefinition, ...] = ()
    properties: tuple[CardProperty, ...] = ()


@dataclass
class ExecutionResult:
    """Outcome of running a single card.

    Attributes:
        card_id: Id of the card that ran.
        outputs: Output-port-name → sequence; empty when the card failed.
        error: Error message, ``None`` on success.
        execution_time: Elapsed wall time in milliseconds.
    """

    card_id: str
    outputs: Outputs = field(default_factory=dict)
    error: str | None = None
    execution_time: float = 0.0

    @property
    def ok(self) -> bool:
        """Return ``True`` when the card ran without error."""
        return self.error is None


@dataclass
class PipelineExecution:
    """Run-level record wrapping the result list of one execution."""

    pipeline_id: str
    start_time: datetime
    results: list[ExecutionResult] = field(default_factory=list)
    status: ExecutionStatus = "running"
    end_time: datetime | None = None
    error: str | None = None

    @property
    def failed_results(self) -> list[ExecutionResult]:
        """Return the results of cards that reported an error."""
        return [r for r in self.results if not r.ok]
