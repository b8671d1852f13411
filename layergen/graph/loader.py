"""
Neo4j loader utilities for layergen.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from neo4j import Driver, GraphDatabase, Session

from layergen.config import Neo4jSettings
from layergen.graph.schema import (
    DEFAULT_SCHEMA,
    NODE_ENTITY,
    NODE_FIELD,
    NODE_PACKAGE,
    NODE_VERSION,
    REL_BASED_ON,
    REL_BELONGS_TO_PACKAGE,
    REL_HAS_FIELD,
    REL_HAS_VERSION,
    REL_REFERENCES,
    REL_RESOLVES_FIELD,
    SchemaMetadata,
    format_node_properties,
)
from layergen.ir import Entity, Field, Layer, ModelGraph, Version, parse_element_id

logger = logging.getLogger(__name__)

VERSION_SEGMENT = "versions"


@dataclass
class GraphLoader:
    """High-level helper that persists entity models into Neo4j."""

    settings: Neo4jSettings
    schema: SchemaMetadata = DEFAULT_SCHEMA
    driver: Driver | None = None

    def __post_init__(self) -> None:
        if self.driver is None:
            auth = (self.settings.username, self.settings.password)
            self.driver = GraphDatabase.driver(self.settings.uri, auth=auth)

    def close(self) -> None:
        if self.driver:
            self.driver.close()

    def _session(self) -> Session:
        if not self.driver:
            raise RuntimeError("Neo4j driver is not initialized")
        return self.driver.session(database=self.settings.database)

    # Constraint/index management -------------------------------------------------
    def ensure_schema(self) -> None:
        with self._session() as session:
            for label, key in self.schema.node_keys.items():
                session.run(f"CREATE CONSTRAINT IF NOT EXISTS FOR (n:{label}) REQUIRE n.{key} IS UNIQUE")

            for label, indexes in self.schema.node_indexes.items():
                for index_property in indexes:
                    session.run(f"CREATE INDEX IF NOT EXISTS FOR (n:{label}) ON (n.{index_property})")

    # Public API -------------------------------------------------------------------
    def sync_model(self, graph: ModelGraph) -> None:
        """Upsert nodes and relationships for all entities of the graph."""

        self.ensure_schema()

        with self._session() as session:
            for entity in graph:
                self._upsert_entity(session, entity, graph.package_of(entity))

            for entity in graph:
                self._upsert_references(session, entity)
                for version in entity.versions:
                    self._upsert_version(session, entity, version)

        logger.info(f"[graph] Synchronised {len(graph)} entities into Neo4j")

    # Internal helpers -------------------------------------------------------------
    def _upsert_entity(self, session: Session, entity: Entity, package_name: str) -> None:
        properties = format_node_properties(
            {
                "id": entity.element_id(),
                "name": entity.base_name,
                "description": entity.description,
                "package": package_name or None,
                "models": _models_text(entity),
                "derivedFrom": entity.derived_from,
            }
        )
        self._merge_node(session, NODE_ENTITY, properties)

        if package_name:
            self._merge_node(session, NODE_PACKAGE, {"id": package_name, "name": package_name})
            self._merge_relationship(
                session,
                start_label=NODE_ENTITY,
                start_id=entity.element_id(),
                rel_type=REL_BELONGS_TO_PACKAGE,
                end_label=NODE_PACKAGE,
                end_id=package_name,
            )

        for field_ir in entity.fields:
            field_id = parse_element_id(entity.base_name, field_ir.field_name)
            self._upsert_field(session, entity, field_ir, field_id)
            self._merge_relationship(
                session,
                start_label=NODE_ENTITY,
                start_id=entity.element_id(),
                rel_type=REL_HAS_FIELD,
                end_label=NODE_FIELD,
                end_id=field_id,
            )

    def _upsert_field(self, session: Session, entity: Entity, field_ir: Field, field_id: str) -> None:
        properties = format_node_properties(
            {
                "id": field_id,
                "name": field_ir.field_name,
                "entityName": entity.base_name,
                "fieldType": field_ir.field_type,
                "models": _models_text(field_ir),
                "shortDescription": field_ir.short_description,
            }
        )
        self._merge_node(session, NODE_FIELD, properties)

    def _upsert_references(self, session: Session, entity: Entity) -> None:
        for reference in entity.references:
            self._merge_relationship(
                session,
                start_label=NODE_ENTITY,
                start_id=entity.element_id(),
                rel_type=REL_REFERENCES,
                end_label=NODE_ENTITY,
                end_id=parse_element_id(reference.target_entity),
                properties={
                    "name": reference.reference_name,
                    "isOwner": reference.is_owner,
                    "isList": reference.is_list,
                },
            )

    def _upsert_version(self, session: Session, entity: Entity, version: Version) -> None:
        version_id = _version_element_id(entity, version.version_id)
        properties = format_node_properties(
            {
                "id": version_id,
                "name": version.version_name,
                "versionId": version.version_id,
                "entityName": entity.base_name,
                "removedFieldNames": version.removed_field_names,
                "removedReferenceNames": version.removed_reference_names,
            }
        )
        self._merge_node(session, NODE_VERSION, properties)
        self._merge_relationship(
            session,
            start_label=NODE_ENTITY,
            start_id=entity.element_id(),
            rel_type=REL_HAS_VERSION,
            end_label=NODE_VERSION,
            end_id=version_id,
        )

        base_version = version.find_base_version(entity)
        if base_version is not None:
            self._merge_node(
                session, NODE_VERSION, {"id": _version_element_id(entity, base_version.version_id)}
            )
            self._merge_relationship(
                session,
                start_label=NODE_VERSION,
                start_id=version_id,
                rel_type=REL_BASED_ON,
                end_label=NODE_VERSION,
                end_id=_version_element_id(entity, base_version.version_id),
            )

        own_fields = {id(field_ir) for field_ir in entity.fields}
        field_ids = _field_element_ids(entity)
        for field_ir in version.determine_fields(entity):
            field_id = field_ids[id(field_ir)]
            if id(field_ir) not in own_fields:
                # Added fields live below the version that declares them
                self._upsert_field(session, entity, field_ir, field_id)
            self._merge_relationship(
                session,
                start_label=NODE_VERSION,
                start_id=version_id,
                rel_type=REL_RESOLVES_FIELD,
                end_label=NODE_FIELD,
                end_id=field_id,
            )

    # Neo4j helpers ----------------------------------------------------------------
    def _merge_node(self, session: Session, label: str, properties: dict) -> None:
        node_id = properties.get("id")
        if not node_id:
            raise ValueError(f"Node properties for label {label} missing 'id'")

        session.run(
            f"MERGE (n:{label} {{id: $id}}) "
            f"SET n += $props",
            id=node_id,
            props=properties,
        )

    def _merge_relationship(
        self,
        session: Session,
        *,
        start_label: str,
        start_id: str,
        rel_type: str,
        end_label: str,
        end_id: str,
        properties: Optional[dict] = None,
    ) -> None:
        if properties:
            session.run(
                f"MATCH (start:{start_label} {{id: $start_id}}) "
                f"MATCH (end:{end_label} {{id: $end_id}}) "
                f"MERGE (start)-[r:{rel_type} {{name: $name}}]->(end) "
                f"SET r += $props",
                start_id=start_id,
                end_id=end_id,
                name=properties.get("name"),
                props=properties,
            )
            return

        session.run(
            f"MATCH (start:{start_label} {{id: $start_id}}) "
            f"MATCH (end:{end_label} {{id: $end_id}}) "
            f"MERGE (start)-[r:{rel_type}]->(end)",
            start_id=start_id,
            end_id=end_id,
        )


def _version_element_id(entity: Entity, version_id: Optional[str]) -> str:
    return parse_element_id(entity.base_name, VERSION_SEGMENT, version_id or "")


def _field_element_ids(entity: Entity) -> dict:
    field_ids = {id(field_ir): parse_element_id(entity.base_name, field_ir.field_name) for field_ir in entity.fields}
    for version in entity.versions:
        for field_ir in version.added_fields or []:
            field_ids[id(field_ir)] = parse_element_id(
                _version_element_id(entity, version.version_id), field_ir.field_name
            )
    return field_ids


def _models_text(item: object) -> Optional[str]:
    models = getattr(item, "models", None)
    if models is None:
        return None
    return "_".join(layer.name for layer in Layer if models.includes(layer))
