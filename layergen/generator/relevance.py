"""
Layer relevance checks used while generating cross-layer code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from layergen.ir.models import Entity, Field, Layer, Models


@dataclass(frozen=True)
class RelevanceFilter:
    """
    Decides which entities and fields take part in a conversion between two layers.

    Elements without any layer restriction are always relevant. Restricted
    elements are relevant only if they are present in both layers.
    """

    first_layer: Layer
    second_layer: Layer

    def is_entity_relevant(self, entity: Entity) -> bool:
        return self._covers(entity.models)

    def is_field_relevant(self, field_ir: Field) -> bool:
        return self._covers(field_ir.models)

    def _covers(self, models: Optional[Models]) -> bool:
        return models is None or (models.includes(self.first_layer) and models.includes(self.second_layer))
