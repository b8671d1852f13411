"""
Intermediate Representation (IR) models for layergen.

The IR layer holds the entity model, with its layers and versions, that the
mapping generator consumes.
"""

from .models import (
    Entity,
    Field,
    Layer,
    ModelGraph,
    Models,
    Reference,
    parse_element_id,
)
from .version import Version

__all__ = [
    "Entity",
    "Field",
    "Layer",
    "ModelGraph",
    "Models",
    "Reference",
    "Version",
    "parse_element_id",
]
