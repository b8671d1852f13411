"""
Definition documents and building the model graph from them.
"""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from layergen.pipeline import ModelBuilder, ModelDefinition


def test_definition_reads_camel_case_keys(sample_definition):
    root = sample_definition.entities[0]

    assert sample_definition.base_package == "fakes"
    assert root.base_name == "Root"
    assert root.references[0].is_owner
    assert root.versions[1].base_version_id == "v1"
    assert root.versions[1].added_fields[0].field_type == "str"


def test_definition_defaults():
    definition = ModelDefinition.model_validate({"entities": [{"baseName": "Root", "fields": [{"fieldName": "a"}]}]})

    layout = definition.package_layout()
    assert (layout.base_package, layout.dao_package, layout.mapper_package) == ("", "dao", "mapper")
    assert definition.entities[0].fields[0].field_type == "str"


def test_definition_rejects_unknown_keys(sample_model):
    sample_model["entities"][0]["unknown"] = True
    with pytest.raises(ValidationError):
        ModelDefinition.model_validate(sample_model)


def test_definition_rejects_unknown_layers(sample_model):
    sample_model["entities"][0]["models"] = "DTO_VIEW"
    with pytest.raises(ValidationError):
        ModelDefinition.model_validate(sample_model)


def test_definition_from_file(tmp_path, sample_model):
    path = tmp_path / "model.json"
    path.write_text(json.dumps(sample_model), encoding="utf-8")

    assert ModelDefinition.from_file(path).groupings[0].grouping_package == "content"


def test_builder_registers_all_entities(sample_graph):
    assert [entity.base_name for entity in sample_graph] == ["Root", "Sub", "Other"]
    assert sample_graph.get("Other").grouping == "content"
    assert sample_graph.get("Root").grouping is None


def test_builder_parses_models(sample_graph):
    other = sample_graph.get("Other")
    internal_key = sample_graph.get("Root").fields[1]

    assert other.models.dto and other.models.domain and not other.models.dao
    assert internal_key.models.dao and not internal_key.models.dto


def test_builder_sets_reference_parents(sample_graph):
    assert all(reference.parent == "Root" for reference in sample_graph.get("Root").references)


def test_builder_links_parents_and_names_versions(sample_graph):
    assert [ref.reference_name for ref in sample_graph.get("Other").parent_refs] == ["others"]
    assert [version.version_name for version in sample_graph.get("Root").versions] == ["RootV1", "RootV2"]


def test_builder_keeps_explicit_version_name(sample_model):
    sample_model["entities"][0]["versions"][0]["versionName"] = "LegacyRoot"

    graph = ModelBuilder().build(ModelDefinition.model_validate(sample_model))

    assert graph.get("Root").versions[0].version_name == "LegacyRoot"


def test_builder_records_duplicates(sample_model):
    sample_model["groupings"][0]["entities"].append({"baseName": "Root"})

    graph = ModelBuilder().build(ModelDefinition.model_validate(sample_model))

    assert graph.duplicate_names == ["Root"]
