"""
Graph schema utilities and Neo4j export of entity models.
"""

from .loader import GraphLoader
from .schema import (
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
)

__all__ = [
    "DEFAULT_SCHEMA",
    "GraphLoader",
    "SchemaMetadata",
    "NODE_ENTITY",
    "NODE_FIELD",
    "NODE_VERSION",
    "NODE_PACKAGE",
    "REL_HAS_FIELD",
    "REL_REFERENCES",
    "REL_HAS_VERSION",
    "REL_BASED_ON",
    "REL_RESOLVES_FIELD",
    "REL_BELONGS_TO_PACKAGE",
]
