"""
Builds the IR model graph from a validated definition document.

Entities are registered explicitly, grouping by grouping. After all entities
are known, owning references are linked back to their targets and missing
version names are derived.
"""

from __future__ import annotations

import logging
from typing import Optional

from layergen.ir import Entity, Field, ModelGraph, Models, Reference, Version
from layergen.pipeline.definition import (
    EntityDefinition,
    FieldDefinition,
    ModelDefinition,
    ReferenceDefinition,
    VersionDefinition,
)

logger = logging.getLogger(__name__)


class ModelBuilder:
    """Turns definition documents into `ModelGraph` instances."""

    def build(self, definition: ModelDefinition) -> ModelGraph:
        graph = ModelGraph()

        for entity_definition in definition.entities:
            graph.register(self._build_entity(entity_definition, grouping=None))

        for grouping in definition.groupings:
            logger.debug(f"[builder] Register grouping {grouping.grouping_package}")
            for entity_definition in grouping.entities:
                graph.register(self._build_entity(entity_definition, grouping=grouping.grouping_package))

        graph.link_parent_refs()
        for entity in graph:
            for version in entity.versions:
                version.generate_version_name(entity)

        logger.info(f"[builder] Built model with {len(graph)} entities")
        return graph

    # Builders ---------------------------------------------------------------------
    def _build_entity(self, definition: EntityDefinition, grouping: Optional[str]) -> Entity:
        entity = Entity(
            base_name=definition.base_name,
            description=definition.description,
            models=_parse_models(definition.models),
            grouping=grouping,
            derived_from=definition.derived_from,
        )
        for field_definition in definition.fields:
            entity.add_field(self._build_field(field_definition))
        for reference_definition in definition.references:
            entity.add_reference(self._build_reference(reference_definition, entity.base_name))
        for version_definition in definition.versions:
            entity.add_version(self._build_version(version_definition, entity.base_name))
        return entity

    def _build_field(self, definition: FieldDefinition) -> Field:
        return Field(
            field_name=definition.field_name,
            field_type=definition.field_type,
            models=_parse_models(definition.models),
            short_description=definition.short_description,
        )

    def _build_reference(self, definition: ReferenceDefinition, parent: str) -> Reference:
        return Reference(
            reference_name=definition.reference_name,
            target_entity=definition.target_entity,
            is_owner=definition.is_owner,
            is_list=definition.is_list,
            parent=parent,
            short_description=definition.short_description,
        )

    def _build_version(self, definition: VersionDefinition, parent: str) -> Version:
        added_fields = None
        if definition.added_fields is not None:
            added_fields = [self._build_field(field_definition) for field_definition in definition.added_fields]
        added_references = None
        if definition.added_references is not None:
            added_references = [
                self._build_reference(reference_definition, parent)
                for reference_definition in definition.added_references
            ]

        return Version(
            version_id=definition.version_id,
            version_name=definition.version_name,
            base_version_id=definition.base_version_id,
            added_fields=added_fields,
            added_references=added_references,
            removed_field_names=definition.removed_field_names,
            removed_reference_names=definition.removed_reference_names,
        )


def _parse_models(value: Optional[str]) -> Optional[Models]:
    if value is None:
        return None
    return Models.parse(value)
