"""JSON save/load for pipelines, card definitions and execution results.

The on-disk format uses camelCase keys and ISO-8601 timestamps so files
written by the browser editor load unchanged.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from card_pipeline.core.datatypes import (
    PROPERTY_TYPES,
    Card,
    CardDefinition,
    CardProperty,
    Connection,
    ExecutionResult,
    Port,
    PortDefinition,
    Position,
)
from card_pipeline.core.exceptions import PersistenceError
from card_pipeline.core.pipeline import Pipeline

logger = logging.getLogger(__name__)


# ── Encoding ──────────────────────────────────────────────────────────────


def port_to_dict(port: Port) -> dict[str, Any]:
    """Encode a port; ``type`` holds the direction as in the editor format."""
    return {
        "id": port.id,
        "name": port.name,
        "type": port.direction,
        "dataType": port.data_type,
        "connected": port.connected,
        "value": port.value,
        "defaultValue": port.default_value,
    }


def property_to_dict(prop: CardProperty) -> dict[str, Any]:
    """Encode a property, leaving out empty ``options`` and ``description``."""
    data: dict[str, Any] = {"name": prop.name, "type": prop.type, "value": prop.value}
    if prop.options is not None:
        data["options"] = list(prop.options)
    if prop.description:
        data["description"] = prop.description
    return data


def card_to_dict(card: Card) -> dict[str, Any]:
    """Encode a card with its ports, properties and canvas position."""
    return {
        "id": card.id,
        "definitionId": card.definition_id,
        "name": card.name,
        "position": {"x": card.position.x, "y": card.position.y},
        "inputPorts": [port_to_dict(p) for p in card.input_ports],
        "outputPorts": [port_to_dict(p) for p in card.output_ports],
        "properties": [property_to_dict(p) for p in card.properties],
        "isSelected": card.is_selected,
    }


def connection_to_dict(connection: Connection) -> dict[str, Any]:
    """Encode a connection as its four endpoint ids."""
    return {
        "id": connection.id,
        "sourceCardId": connection.source_card_id,
        "sourcePortId": connection.source_port_id,
        "targetCardId": connection.target_card_id,
        "targetPortId": connection.target_port_id,
    }


def pipeline_to_dict(pipeline: Pipeline) -> dict[str, Any]:
    """Encode a pipeline as a JSON-compatible dict."""
    return {
        "id": pipeline.id,
        "name": pipeline.name,
        "description": pipeline.description,
        "cards": [card_to_dict(c) for c in pipeline.cards],
        "connections": [connection_to_dict(c) for c in pipeline.connections],
        "createdAt": _format_timestamp(pipeline.created_at),
        "updatedAt": _format_timestamp(pipeline.updated_at),
    }


def definition_to_dict(definition: CardDefinition) -> dict[str, Any]:
    """Encode a card definition in the ``cards.json`` layout."""

    def port_shape(port: PortDefinition, direction: str) -> dict[str, Any]:
        shape: dict[str, Any] = {"name": port.name, "type": direction, "dataType": port.data_type}
        if port.default_value is not None:
            shape["defaultValue"] = port.default_value
        return shape

    return {
        "id": definition.id,
        "name": definition.name,
        "description": definition.description,
        "category": definition.category,
        "inputPorts": [port_shape(p, "input") for p in definition.input_ports],
        "outputPorts": [port_shape(p, "output") for p in definition.output_ports],
        "properties": [property_to_dict(p) for p in definition.properties],
        "executor": definition.executor,
    }


def result_to_dict(result: ExecutionResult) -> dict[str, Any]:
    """Encode an execution result; ``error`` is omitted on success."""
    data: dict[str, Any] = {
        "cardId": result.card_id,
        "outputs": {name: list(value) for name, value in result.outputs.items()},
        "executionTime": result.execution_time,
    }
    if result.error is not None:
        data["error"] = result.error
    return data


# ── Decoding ──────────────────────────────────────────────────────────────


def port_from_dict(data: dict[str, Any]) -> Port:
    """Decode a port.

    Raises:
        PersistenceError: If ``type`` is neither ``"input"`` nor ``"output"``.
    """
    direction = data.get("type", "input")
    if direction not in ("input", "output"):
        msg = f"Port '{data.get('name')}' has invalid type {direction!r}"
        raise PersistenceError(msg)
    return Port(
        id=data["id"],
        name=data["name"],
        direction=direction,
        data_type=data.get("dataType", "any"),
        connected=bool(data.get("connected", False)),
        value=data.get("value"),
        default_value=data.get("defaultValue"),
    )


def property_from_dict(data: dict[str, Any]) -> CardProperty:
    """Decode a property.

    Raises:
        PersistenceError: If ``type`` is not a known property type.
    """
    prop_type = data.get("type", "string")
    if prop_type not in PROPERTY_TYPES:
        msg = f"Property '{data.get('name')}' has unknown type {prop_type!r}"
        raise PersistenceError(msg)
    options = data.get("options")
    return CardProperty(
        name=data["name"],
        type=prop_type,
        value=data.get("value"),
        options=list(options) if options is not None else None,
        description=data.get("description", ""),
    )


def card_from_dict(data: dict[str, Any]) -> Card:
    """Decode a card; a missing ``position`` places it at the origin.

    Raises:
        PersistenceError: If ``position`` is present but not an object.
    """
    position = data.get("position") or {}
    if not isinstance(position, dict):
        msg = f"Card '{data.get('id')}' has invalid position {position!r}"
        raise PersistenceError(msg)
    return Card(
        id=data["id"],
        definition_id=data["definitionId"],
        name=data.get("name", data["definitionId"]),
        position=Position(x=float(position.get("x", 0.0)), y=float(position.get("y", 0.0))),
        input_ports=[port_from_dict(p) for p in data.get("inputPorts", [])],
        output_ports=[port_from_dict(p) for p in data.get("outputPorts", [])],
        properties=[property_from_dict(p) for p in data.get("properties", [])],
        is_selected=bool(data.get("isSelected", False)),
    )


def connection_from_dict(data: dict[str, Any]) -> Connection:
    """Decode a connection; every endpoint id is required."""
    return Connection(
        id=data["id"],
        source_card_id=data["sourceCardId"],
        source_port_id=data["sourcePortId"],
        target_card_id=data["targetCardId"],
        target_port_id=data["targetPortId"],
    )


def pipeline_from_dict(data: dict[str, Any]) -> Pipeline:
    """Decode a pipeline dict produced by :func:`pipeline_to_dict`.

    Raises:
        PersistenceError: If a required key is missing or malformed.
    """
    try:
        return Pipeline(
            id=data["id"],
            name=data.get("name", "Untitled Pipeline"),
            description=data.get("description", ""),
            cards=[card_from_dict(c) for c in data.get("cards", [])],
            connections=[connection_from_dict(c) for c in data.get("connections", [])],
            created_at=_parse_timestamp(data.get("createdAt")),
            updated_at=_parse_timestamp(data.get("updatedAt")),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        msg = f"Malformed pipeline data: {exc!r}"
        raise PersistenceError(msg) from exc


def definition_from_dict(data: dict[str, Any]) -> CardDefinition:
    """Decode one entry of a ``cards.json`` file.

    Raises:
        PersistenceError: If a required key is missing or malformed.
    """

    def port_shape(shape: dict[str, Any]) -> PortDefinition:
        return PortDefinition(
            name=shape["name"],
            data_type=shape.get("dataType", "any"),
            default_value=shape.get("defaultValue"),
        )

    try:
        return CardDefinition(
            id=data["id"],
            name=data.get("name", data["id"]),
            executor=data["executor"],
            description=data.get("description", ""),
            category=data.get("category", "General"),
            input_ports=tuple(port_shape(p) for p in data.get("inputPorts", [])),
            output_ports=tuple(port_shape(p) for p in data.get("outputPorts", [])),
            properties=tuple(property_from_dict(p) for p in data.get("properties", [])),
        )
    except (KeyError, TypeError) as exc:
        msg = f"Malformed card definition: {exc!r}"
        raise PersistenceError(msg) from exc


# ── Files ─────────────────────────────────────────────────────────────────


def save_pipeline(pipeline: Pipeline, path: Path) -> Path:
    """Write *pipeline* to *path* as indented JSON.

    Args:
        pipeline: Pipeline to save.
        path: Destination file; parent directories are created.

    Returns:
        The written path.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(pipeline_to_dict(pipeline), indent=2), encoding="utf-8")
    logger.info("Saved pipeline '%s' to %s", pipeline.name, path)
    return path


def load_pipeline(path: Path) -> Pipeline:
    """Read a pipeline file written by :func:`save_pipeline`.

    Raises:
        PersistenceError: If the file is missing, not JSON or malformed.
    """
    data = read_json(path)
    if not isinstance(data, dict):
        msg = f"Pipeline file '{path}' must contain a JSON object"
        raise PersistenceError(msg)
    pipeline = pipeline_from_dict(data)
    logger.info("Loaded pipeline '%s' (%d cards) from %s", pipeline.name, len(pipeline.cards), path)
    return pipeline


def read_json(path: Path) -> Any:
    """Parse a JSON file, wrapping I/O and syntax errors in ``PersistenceError``."""
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        msg = f"Cannot read '{path}': {exc.strerror or exc}"
        raise PersistenceError(msg) from exc
    except json.JSONDecodeError as exc:
        msg = f"File '{path}' is not valid JSON: {exc}"
        raise PersistenceError(msg) from exc


def _format_timestamp(value: datetime) -> str:
    """Render *value* as ISO-8601."""
    return value.isoformat()


def _parse_timestamp(value: str | None) -> datetime:
    """Parse an ISO-8601 timestamp; a missing value means now."""
    if not value:
        return datetime.now(timezone.utc)
    return datetime.fromisoformat(value)
