"""DefinitionCatalog — card definitions loaded once and shared by all cards."""

from __future__ import annotations

import copy
import logging
import uuid
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path

from card_pipeline.core.datatypes import Card, CardDefinition, Port, Position
from card_pipeline.core.exceptions import DefinitionNotFoundError, PersistenceError
from card_pipeline.core.persistence import definition_from_dict, read_json

logger = logging.getLogger(__name__)

BUILTIN_DEFINITIONS = Path(__file__).with_name("cards.json")


def instantiate_card(definition: CardDefinition, position: Position | None = None) -> Card:
    """Create a card whose ports and properties are independent copies of *definition*'s.

    Args:
        definition: Template to instantiate.
        position: Canvas position; defaults to the origin.

    Returns:
        A new card with fresh card and port ids.
    """
    return Card(
        id=str(uuid.uuid4()),
        definition_id=definition.id,
        name=definition.name,
        position=position or Position(),
        input_ports=[
            Port(
                id=str(uuid.uuid4()),
                name=shape.name,
                direction="input",
                data_type=shape.data_type,
                value=copy.deepcopy(shape.default_value),
                default_value=copy.deepcopy(shape.default_value),
            )
            for shape in definition.input_ports
        ],
        output_ports=[
            Port(id=str(uuid.uuid4()), name=shape.name, direction="output", data_type=shape.data_type)
            for shape in definition.output_ports
        ],
        properties=[copy.deepcopy(prop) for prop in definition.properties],
    )


class DefinitionCatalog(Mapping[str, CardDefinition]):
    """Read-only ``definition id → CardDefinition`` lookup.

    Args:
        definitions: Definitions to index; later duplicates replace earlier ones.
    """

    def __init__(self, definitions: Iterable[CardDefinition] = ()) -> None:
        self._definitions: dict[str, CardDefinition] = {d.id: d for d in definitions}

    @classmethod
    def from_file(cls, path: Path) -> DefinitionCatalog:
        """Load definitions from a JSON file.

        The file holds either a list of definitions or an object whose
        values are definitions (keyed by id).

        Args:
            path: Path to the JSON file.

        Raises:
            PersistenceError: If the file cannot be read or parsed.
        """
        data = read_json(path)
        if isinstance(data, dict):
            entries = list(data.values())
        elif isinstance(data, list):
            entries = data
        else:
            msg = f"Definition file '{path}' must contain a JSON object or array"
            raise PersistenceError(msg)

        catalog = cls(definition_from_dict(entry) for entry in entries)
        logger.info("Loaded %d card definitions from %s", len(catalog), path)
        return catalog

    @classmethod
    def builtin(cls) -> DefinitionCatalog:
        """Return the definitions shipped with the package."""
        return cls.from_file(BUILTIN_DEFINITIONS)

    def __getitem__(self, definition_id: str) -> CardDefinition:
        return self._definitions[definition_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def by_category(self) -> dict[str, list[CardDefinition]]:
        """Group definitions by category, preserving load order."""
        groups: dict[str, list[CardDefinition]] = {}
        for definition in self._definitions.values():
            groups.setdefault(definition.category, []).append(definition)
        return groups

    def create_card(self, definition_id: str, position: Position | None = None) -> Card:
        """Instantiate a card from the definition with *definition_id*.

        Raises:
            DefinitionNotFoundError: If the id is unknown.
        """
        definition = self._definitions.get(definition_id)
        if definition is None:
            msg = f"Card definition not found: {definition_id}"
            raise DefinitionNotFoundError(msg)
        return instantiate_card(definition, position)
