"""
Package and class naming of generated sources.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from layergen.ir.models import Entity, Layer, ModelGraph, join_package, to_snake_case


@dataclass(frozen=True)
class PackageLayout:
    """
    Where the classes of each layer live.

    Layer packages are relative to `base_package`; grouping packages are
    appended below them, e.g. ``sample.dto.content``.
    """

    base_package: str = ""
    dao_package: str = "dao"
    dto_package: str = "dto"
    domain_package: str = "domain"
    mapper_package: str = "mapper"

    def layer_package(self, layer: Layer, grouping: Optional[str] = None) -> str:
        relative = {
            Layer.DAO: self.dao_package,
            Layer.DTO: self.dto_package,
            Layer.DOMAIN: self.domain_package,
        }[layer]
        return join_package(self.base_package, relative, grouping)

    def mapper_package_name(self, grouping: Optional[str] = None) -> str:
        return join_package(self.base_package, self.mapper_package, grouping)

    def class_name(self, entity: Entity, layer: Layer) -> str:
        """
        Name of the entity's class in a layer.

        Version snapshots only have classes of their own in the transport
        layer; elsewhere they use the classes of the versioned entity.
        """

        name = entity.base_name
        if entity.version_of and layer is not Layer.DTO:
            name = entity.version_of
        return name + layer.postfix

    def qualified_class(self, graph: ModelGraph, entity: Entity, layer: Layer) -> str:
        class_name = self.class_name(entity, layer)
        package = self.layer_package(layer, graph.package_of(entity))
        return join_package(package, to_snake_case(class_name), class_name)
