"""
Centralized definitions for the Neo4j schema of exported entity models.

The loader module relies on the metadata in this file to create constraints
and indexes, and to keep relationship semantics consistent across exports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Sequence


NODE_ENTITY = "Entity"
NODE_FIELD = "Field"
NODE_VERSION = "Version"
NODE_PACKAGE = "Package"

REL_HAS_FIELD = "HAS_FIELD"
REL_REFERENCES = "REFERENCES"
REL_HAS_VERSION = "HAS_VERSION"
REL_BASED_ON = "BASED_ON"
REL_RESOLVES_FIELD = "RESOLVES_FIELD"
REL_BELONGS_TO_PACKAGE = "BELONGS_TO_PACKAGE"


@dataclass(frozen=True)
class SchemaMetadata:
    """
    Encapsulates node and relationship configurations required by the loader.

    Attributes:
        node_keys: Mapping of node label -> property used as unique identifier.
        node_indexes: Mapping of node label -> sequence of additional indexed properties.
        relationship_types: Sequence of supported relationship type names.
    """

    node_keys: Mapping[str, str]
    node_indexes: Mapping[str, Sequence[str]]
    relationship_types: Sequence[str]


DEFAULT_SCHEMA = SchemaMetadata(
    node_keys={
        NODE_ENTITY: "id",
        NODE_FIELD: "id",
        NODE_VERSION: "id",
        NODE_PACKAGE: "id",
    },
    node_indexes={
        NODE_ENTITY: ("name", "package"),
        NODE_FIELD: ("name", "entityName"),
        NODE_VERSION: ("name", "entityName"),
        NODE_PACKAGE: ("name",),
    },
    relationship_types=(
        REL_HAS_FIELD,
        REL_REFERENCES,
        REL_HAS_VERSION,
        REL_BASED_ON,
        REL_RESOLVES_FIELD,
        REL_BELONGS_TO_PACKAGE,
    ),
)


def format_node_properties(payload: Dict[str, object]) -> Dict[str, object]:
    """Drop None values so that merges are deterministic."""

    return {key: value for key, value in payload.items() if value is not None}
