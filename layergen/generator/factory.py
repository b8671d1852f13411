"""
Object factory generation.

Each layer of a grouping gets a factory module with one creation function per
entity class of that layer, e.g. ``create_root_dto()`` in
``sample.dto.content.dto_object_factory``.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from layergen.generator.naming import PackageLayout
from layergen.generator.relevance import RelevanceFilter
from layergen.ir.models import Entity, Layer, ModelGraph, to_snake_case, upper_first
from layergen.sources import Method, SourceModule

logger = logging.getLogger(__name__)


def object_factory_name(layer: Layer) -> str:
    return f"{upper_first(layer.value)}ObjectFactory"


class ObjectFactoryGenerator:
    """Creates the object factory module of a layer."""

    def __init__(self, graph: ModelGraph, layout: PackageLayout | None = None) -> None:
        self._graph = graph
        self._layout = layout or PackageLayout()

    def create_object_factory(
        self,
        entities: Sequence[Entity],
        layer: Layer,
        grouping: Optional[str] = None,
    ) -> Optional[SourceModule]:
        in_layer = RelevanceFilter(layer, layer)
        relevant = [entity for entity in entities if in_layer.is_entity_relevant(entity)]
        if not relevant:
            logger.debug(f"[factory] No {object_factory_name(layer)} needed for grouping {grouping or '<root>'}")
            return None

        module = SourceModule(
            package=self._layout.layer_package(layer, grouping),
            name=object_factory_name(layer),
            description=f"Generated factory of the {layer.value} classes.",
        )
        for entity in relevant:
            class_name = self._layout.class_name(entity, layer)
            method_name = f"create_{to_snake_case(class_name)}"
            if method_name in module.method_names():
                continue
            method = Method(name=method_name, return_type=class_name)
            method.add_line("return %s()", class_name)
            module.add_method(method)
            module.add_import(self._layout.qualified_class(self._graph, entity, layer))
        return module
