"""Tests for saving and loading pipelines as JSON."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from card_pipeline.core.datatypes import ExecutionResult, Position
from card_pipeline.core.definitions import DefinitionCatalog
from card_pipeline.core.exceptions import PersistenceError
from card_pipeline.core.persistence import load_pipeline, result_to_dict, save_pipeline
from card_pipeline.core.pipeline import Pipeline


class TestRoundTrip:
    """Saved pipelines load back with every field intact."""

    def test_save_then_load_preserves_pipeline(self, tmp_path: Path) -> None:
        """Cards, ports, properties, connections and timestamps survive."""
        catalog = DefinitionCatalog.builtin()
        pipeline = Pipeline(name="Saved", description="round trip")
        generator = pipeline.add_card(catalog.create_card("number-generator", Position(x=1.5, y=2)))
        number_filter = pipeline.add_card(catalog.create_card("filter"))
        pipeline.set_property(number_filter.id, "operator", "greater")
        pipeline.connect_by_name(generator, "numbers", number_filter, "array")
        generator.is_selected = True

        path = save_pipeline(pipeline, tmp_path / "nested" / "saved.json")
        loaded = load_pipeline(path)

        assert loaded == pipeline

    def test_file_uses_camel_case_keys(self, tmp_path: Path) -> None:
        """The on-disk layout matches the editor's format."""
        catalog = DefinitionCatalog.builtin()
        pipeline = Pipeline(name="Keys")
        pipeline.add_card(catalog.create_card("print-array"))

        data = json.loads(save_pipeline(pipeline, tmp_path / "p.json").read_text())

        assert set(data) == {"id", "name", "description", "cards", "connections", "createdAt", "updatedAt"}
        card = data["cards"][0]
        assert card["definitionId"] == "print-array"
        assert card["inputPorts"][0]["type"] == "input"
        assert card["outputPorts"][0]["dataType"] == "array"


class TestLoadErrors:
    """Bad files raise ``PersistenceError``."""

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Syntax errors are reported."""
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(PersistenceError, match="not valid JSON"):
            load_pipeline(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        """Unreadable files are reported."""
        with pytest.raises(PersistenceError, match="Cannot read"):
            load_pipeline(tmp_path / "absent.json")

    def test_missing_required_key(self, tmp_path: Path) -> None:
        """Connections must carry all four endpoint ids."""
        path = tmp_path / "partial.json"
        path.write_text(json.dumps({"id": "p", "cards": [], "connections": [{"id": "c", "sourceCardId": "a"}]}))

        with pytest.raises(PersistenceError, match="Malformed pipeline"):
            load_pipeline(path)

    def test_non_object_position(self, tmp_path: Path) -> None:
        """A card position that is not an object is reported, not raised raw."""
        card = {"id": "c", "definitionId": "filter", "position": [1, 2]}
        path = tmp_path / "position.json"
        path.write_text(json.dumps({"id": "p", "cards": [card], "connections": []}))

        with pytest.raises(PersistenceError, match="invalid position"):
            load_pipeline(path)

    def test_non_object_card_entry(self, tmp_path: Path) -> None:
        """Card entries must be objects."""
        path = tmp_path / "cards.json"
        path.write_text(json.dumps({"id": "p", "cards": ["filter"], "connections": []}))

        with pytest.raises(PersistenceError, match="Malformed pipeline"):
            load_pipeline(path)

    def test_array_document_rejected(self, tmp_path: Path) -> None:
        """The top level must be an object."""
        path = tmp_path / "list.json"
        path.write_text("[]")

        with pytest.raises(PersistenceError, match="JSON object"):
            load_pipeline(path)


class TestResultEncoding:
    """Execution results as JSON."""

    def test_success_omits_error(self) -> None:
        """Successful results carry no ``error`` key."""
        data = result_to_dict(ExecutionResult(card_id="a", outputs={"x": (1, 2)}, execution_time=1.5))
        assert data == {"cardId": "a", "outputs": {"x": [1, 2]}, "executionTime": 1.5}

    def test_failure_includes_error(self) -> None:
        """Failed results carry the message."""
        data = result_to_dict(ExecutionResult(card_id="a", error="boom"))
        assert data["error"] == "boom"
        assert data["outputs"] == {}
