"""
Version resolution and validation.
"""
from __future__ import annotations

import pytest

from layergen.ir import Entity, Field, Reference, Version

ENTITY_NAME = "Entity"
BASE_VERSION_ID = "base"
VERSION_ID = "v2"


@pytest.fixture()
def parts():
    entity_field = Field("entityField", "str")
    removed_field = Field("removedField", "str")
    base_version_field = Field("baseVersionField", "str")
    added_field = Field("addedField", "str")
    entity_reference = Reference("entityReference", "Target")
    removed_reference = Reference("removedReference", "Target")
    base_version_reference = Reference("baseVersionReference", "Target")
    added_reference = Reference("addedReference", "Target")

    entity = Entity(base_name=ENTITY_NAME)
    entity.add_field(entity_field)
    entity.add_field(removed_field)
    entity.add_reference(entity_reference)
    entity.add_reference(removed_reference)

    base_version = Version(
        version_id=BASE_VERSION_ID,
        added_fields=[base_version_field],
        added_references=[base_version_reference],
    )
    cut = Version(
        version_id=VERSION_ID,
        base_version_id=BASE_VERSION_ID,
        added_fields=[added_field],
        added_references=[added_reference],
        removed_field_names=["removedField"],
        removed_reference_names=["removedReference"],
    )
    entity.add_version(base_version)
    entity.add_version(cut)
    return {
        "entity": entity,
        "cut": cut,
        "entity_field": entity_field,
        "removed_field": removed_field,
        "base_version_field": base_version_field,
        "added_field": added_field,
        "entity_reference": entity_reference,
        "removed_reference": removed_reference,
        "base_version_reference": base_version_reference,
        "added_reference": added_reference,
    }


def test_is_valid(parts):
    messages = []
    assert parts["cut"].is_valid(messages, parts["entity"])
    assert messages == []


def test_is_valid_without_optional_lists(parts):
    cut = parts["cut"]
    cut.added_fields = None
    cut.added_references = None
    cut.base_version_id = None

    messages = []
    assert cut.is_valid(messages, parts["entity"])
    assert messages == []


def test_is_valid_missing_version_id(parts):
    parts["cut"].version_id = None

    messages = []
    assert not parts["cut"].is_valid(messages, parts["entity"])
    assert len(messages) == 1


def test_is_valid_empty_version_name(parts):
    parts["cut"].version_name = ""

    messages = []
    assert not parts["cut"].is_valid(messages, parts["entity"])
    assert len(messages) == 1


def test_is_valid_missing_field_to_remove(parts):
    parts["entity"].fields.remove(parts["removed_field"])

    messages = []
    assert not parts["cut"].is_valid(messages, parts["entity"])
    assert len(messages) == 1
    assert "removedField" in messages[0]


def test_is_valid_missing_reference_to_remove(parts):
    parts["entity"].references.remove(parts["removed_reference"])

    messages = []
    assert not parts["cut"].is_valid(messages, parts["entity"])
    assert len(messages) == 1
    assert "removedReference" in messages[0]


def test_is_valid_invalid_field_to_add(parts):
    parts["added_field"].field_name = ""

    messages = []
    assert not parts["cut"].is_valid(messages, parts["entity"])
    assert len(messages) == 1


def test_is_valid_invalid_reference_to_add(parts):
    parts["added_reference"].target_entity = ""

    messages = []
    assert not parts["cut"].is_valid(messages, parts["entity"])
    assert len(messages) == 1


def test_is_valid_missing_base_version(parts):
    parts["cut"].base_version_id = BASE_VERSION_ID + "1"

    messages = []
    assert not parts["cut"].is_valid(messages, parts["entity"])
    assert len(messages) == 1
    assert BASE_VERSION_ID + "1" in messages[0]


def test_determine_fields(parts):
    result = parts["cut"].determine_fields(parts["entity"])

    assert len(result) == 3
    assert parts["added_field"] in result
    assert parts["base_version_field"] in result
    assert parts["entity_field"] in result
    assert parts["removed_field"] not in result


def test_determine_fields_without_delta(parts):
    parts["cut"].added_fields = None
    parts["cut"].removed_field_names = None

    result = parts["cut"].determine_fields(parts["entity"])

    assert len(result) == 3
    assert parts["added_field"] not in result
    assert parts["base_version_field"] in result
    assert parts["entity_field"] in result
    assert parts["removed_field"] in result


def test_determine_references(parts):
    result = parts["cut"].determine_references(parts["entity"])

    assert len(result) == 3
    assert parts["added_reference"] in result
    assert parts["base_version_reference"] in result
    assert parts["entity_reference"] in result
    assert parts["removed_reference"] not in result


def test_determine_references_without_delta(parts):
    parts["cut"].added_references = None
    parts["cut"].removed_reference_names = None

    result = parts["cut"].determine_references(parts["entity"])

    assert len(result) == 3
    assert parts["added_reference"] not in result
    assert parts["removed_reference"] in result


def test_determine_fields_keeps_base_order(parts):
    result = parts["cut"].determine_fields(parts["entity"])
    assert [field_ir.field_name for field_ir in result] == ["entityField", "baseVersionField", "addedField"]


def test_removal_applies_after_additions(parts):
    cut = parts["cut"]
    cut.added_fields = [Field("removedField", "int"), parts["added_field"]]

    names = [field_ir.field_name for field_ir in cut.determine_fields(parts["entity"])]

    assert "removedField" not in names
    assert "addedField" in names


def test_base_version_changes_are_picked_up(parts):
    cut = parts["cut"]
    assert len(cut.determine_fields(parts["entity"])) == 3

    later_field = Field("laterField", "str")
    parts["entity"].find_version(BASE_VERSION_ID).added_fields.append(later_field)

    assert later_field in cut.determine_fields(parts["entity"])


def test_cyclic_base_versions_fall_back_to_entity(parts):
    entity = parts["entity"]
    entity.find_version(BASE_VERSION_ID).base_version_id = VERSION_ID

    result = parts["cut"].determine_fields(entity)
    messages = []

    assert parts["entity_field"] in result
    assert parts["added_field"] in result
    assert not parts["cut"].is_valid(messages, entity)
    assert any("cycle" in message for message in messages)


@pytest.mark.parametrize(
    "version_id, expected",
    [("v2", "EntityV2"), ("2", "Entity2")],
)
def test_generate_version_name(parts, version_id, expected):
    cut = parts["cut"]
    cut.version_id = version_id

    cut.generate_version_name(parts["entity"])

    assert cut.version_name == expected


def test_generate_version_name_already_set(parts):
    cut = parts["cut"]
    cut.version_name = "abc"

    cut.generate_version_name(parts["entity"])

    assert cut.version_name == "abc"


def test_resolve_builds_snapshot(parts):
    snapshot = parts["cut"].resolve(parts["entity"])

    assert snapshot.base_name == "EntityV2"
    assert snapshot.version_of == ENTITY_NAME
    assert snapshot.parent_refs == []
    assert [field_ir.field_name for field_ir in snapshot.fields] == ["entityField", "baseVersionField", "addedField"]
    assert [reference.reference_name for reference in snapshot.references] == [
        "entityReference",
        "baseVersionReference",
        "addedReference",
    ]
