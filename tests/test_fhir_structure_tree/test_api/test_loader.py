"""Tests for loading and structurizing StructureDefinition documents."""

import json

import pytest

from fhir_structure_tree import (
    StructureTreeConfig,
    rebuild_definition,
    structurize_file,
    structurize_string,
)
from fhir_structure_tree.api import (
    StructureDefinitionLoadError,
    load_structure_definition,
    unwrap_resource,
)
from fhir_structure_tree.shared import MissingSnapshotError


class TestUnwrapResource:
    """Test extracting the StructureDefinition from a document."""

    def test_bare_resource(self, heart_rate_profile):
        assert unwrap_resource(heart_rate_profile) is heart_rate_profile

    def test_entry_envelope(self, heart_rate_profile):
        """Test the bundle entry and package fixture shape."""
        document = {"fullUrl": heart_rate_profile["url"], "resource": heart_rate_profile}

        assert unwrap_resource(document) is heart_rate_profile

    def test_wrong_resource_type(self):
        with pytest.raises(StructureDefinitionLoadError, match="got Patient"):
            unwrap_resource({"resourceType": "Patient", "id": "example"})

    def test_not_an_object(self):
        with pytest.raises(StructureDefinitionLoadError, match="got list"):
            unwrap_resource([])
        with pytest.raises(StructureDefinitionLoadError, match="must be a JSON object"):
            unwrap_resource({"resource": "heartrate"})


class TestStructurizeString:
    """Test structurizing JSON text."""

    def test_structurize_string(self, heart_rate_profile, heart_rate_paths):
        definition = structurize_string(json.dumps(heart_rate_profile))

        assert definition.meta.type == "Observation"
        assert [node.path for node in definition.iter_attributes()] == heart_rate_paths

    def test_config_is_forwarded(self, heart_rate_profile):
        definition = structurize_string(
            json.dumps(heart_rate_profile), config=StructureTreeConfig.keep_inherited()
        )

        assert definition.get_attribute("id") is not None

    def test_warning_sink_is_forwarded(self, extension_profile):
        received = []

        structurize_string(json.dumps(extension_profile), warning_sink=received.append)

        assert [w.field_name for w in received] == ["constraint"]

    def test_invalid_json(self):
        with pytest.raises(StructureDefinitionLoadError, match="Invalid JSON"):
            structurize_string("{\"resourceType\": ")

    def test_missing_snapshot_propagates(self):
        with pytest.raises(MissingSnapshotError):
            structurize_string(json.dumps({"resourceType": "StructureDefinition"}))


class TestStructurizeFile:
    """Test structurizing JSON files."""

    def test_structurize_file(self, tmp_path, heart_rate_profile):
        path = tmp_path / "StructureDefinition-heartrate.json"
        path.write_text(json.dumps(heart_rate_profile), encoding="utf-8")

        definition = structurize_file(path)

        assert definition.meta.id == "heartrate"
        assert definition.metrics.root_count == 7

    def test_accepts_string_paths(self, tmp_path, extension_profile):
        path = tmp_path / "birthPlace.json"
        path.write_text(json.dumps({"resource": extension_profile}), encoding="utf-8")

        assert load_structure_definition(str(path))["id"] == "patient-birthPlace"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            structurize_file(tmp_path / "missing.json")

    def test_invalid_file_content(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("not json", encoding="utf-8")

        with pytest.raises(StructureDefinitionLoadError, match="invalid JSON"):
            structurize_file(path)


class TestRebuildDefinition:
    """Test rebuilding definitions from their serialized form."""

    def test_from_json_text(self, heart_rate_profile, heart_rate_paths):
        serialized = json.dumps(structurize_string(json.dumps(heart_rate_profile)).to_dict())

        definition = rebuild_definition(serialized)

        assert [node.path for node in definition.iter_attributes()] == heart_rate_paths

    def test_rebuilt_tree_is_editable(self, heart_rate_profile):
        """Test item allocation on a rebuilt definition."""
        original = structurize_string(json.dumps(heart_rate_profile))
        original.get_attribute("identifier").add_item()

        definition = rebuild_definition(original.to_dict())
        item = definition.get_attribute("identifier").add_item()

        assert item.path == "identifier[1]"
