from __future__ import annotations

from layergen.generator import RelevanceFilter
from layergen.ir import Entity, Field, Layer, Models


def test_unrestricted_elements_are_relevant():
    relevance = RelevanceFilter(Layer.DOMAIN, Layer.DTO)
    assert relevance.is_entity_relevant(Entity(base_name="Root"))
    assert relevance.is_field_relevant(Field("name", "str"))


def test_restricted_entity_needs_both_layers():
    entity = Entity(base_name="Root", models=Models.parse("DTO_DOMAIN"))

    assert RelevanceFilter(Layer.DOMAIN, Layer.DTO).is_entity_relevant(entity)
    assert not RelevanceFilter(Layer.DOMAIN, Layer.DAO).is_entity_relevant(entity)


def test_restricted_field_in_single_layer():
    field_ir = Field("internalKey", "int", models=Models.parse("DAO"))

    assert RelevanceFilter(Layer.DAO, Layer.DAO).is_field_relevant(field_ir)
    assert not RelevanceFilter(Layer.DOMAIN, Layer.DAO).is_field_relevant(field_ir)
