"""
Mapper generation between two layers.

For every relevant entity the generator emits conversion functions in both
directions. All conversions of one call share a `mapped_objects` registry
which maps the identity of a source object to its converted counterpart, so
cyclic object graphs are converted once per object and never recurse
endlessly.
"""

from __future__ import annotations

import keyword
import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from layergen.generator.naming import PackageLayout
from layergen.generator.relevance import RelevanceFilter
from layergen.ir.models import Entity, Layer, ModelGraph, Reference, join_package, to_snake_case, upper_first
from layergen.sources import TAB, Method, SourceModule

logger = logging.getLogger(__name__)

IDENTIFY_IMPORT = "layergen.runtime.identify"
OPTIONAL_IMPORT = "typing.Optional"

MAPPED_OBJECTS_PARAMETER = "mapped_objects"
MAPPED_OBJECTS_TYPE = "dict"
PARENT_PARAMETER = "parent"
RETURN_RESULT_TEXT = "return result"

_RESERVED_NAMES = {"identification", "identify", "result", MAPPED_OBJECTS_PARAMETER, PARENT_PARAMETER}


class MapperType(Enum):
    """Kinds of mappers, each bridging the domain layer with one other layer."""

    ACCESS = ("AccessMapper", Layer.DOMAIN, Layer.DAO)
    TRANSPORT = ("TransportMapper", Layer.DOMAIN, Layer.DTO)

    def __init__(self, mapper_name: str, first_layer: Layer, second_layer: Layer) -> None:
        self.mapper_name = mapper_name
        self.first_layer = first_layer
        self.second_layer = second_layer

    @property
    def includes_versions(self) -> bool:
        """Version snapshots are transport representations."""

        return self is MapperType.TRANSPORT


@dataclass
class MappingResult:
    """Generated procedures per entity base name and the imports they need."""

    procedures: Dict[str, List[Method]] = field(default_factory=dict)
    imports: Set[str] = field(default_factory=set)

    def methods(self) -> List[Method]:
        return [method for methods in self.procedures.values() for method in methods]


@dataclass(frozen=True)
class _Direction:
    source: Layer
    target: Layer
    relevance: RelevanceFilter
    local_entities: frozenset
    locations: Mapping[str, str]


def convert_function_name(
    entity: Entity,
    layer: Layer,
    *,
    parent_ref: Optional[Reference] = None,
    qualified: bool = False,
    mapped: bool = False,
) -> str:
    """
    Name of a generated conversion function.

    ``convert_root_to_dto`` converts a `Root` into the dto layer. Parent aware
    variants add ``_with_parent_<reference>``, or ``_with_parent_<parent>_<reference>``
    when `qualified` is set because several parents own the entity through
    equally named references. Variants taking an explicit registry end with
    ``_mapped``.
    """

    name = f"convert_{to_snake_case(entity.base_name)}_to_{layer.value}"
    if parent_ref is not None:
        suffix = to_snake_case(parent_ref.reference_name)
        if qualified:
            suffix = f"{to_snake_case(parent_ref.target_entity)}_{suffix}"
        name += f"_with_parent_{suffix}"
    if mapped:
        name += "_mapped"
    return name


def mapper_class_name(mapper_type: MapperType, grouping: Optional[str] = None) -> str:
    grouping_name = (grouping or "").rsplit(".", 1)[-1]
    return upper_first(grouping_name) + mapper_type.mapper_name


def _parameter_name(entity: Entity) -> str:
    name = to_snake_case(entity.base_name)
    if name in _RESERVED_NAMES or keyword.iskeyword(name):
        return f"{name}_source"
    return name


class MappingGenerator:
    """Generates conversion functions between the layer representations of entities."""

    def __init__(self, graph: ModelGraph, layout: PackageLayout | None = None) -> None:
        self._graph = graph
        self._layout = layout or PackageLayout()

    # Public API -------------------------------------------------------------------
    def generate_mapping(
        self,
        entities: Sequence[Entity],
        layer_a: Layer,
        layer_b: Layer,
        locations: Mapping[str, str] | None = None,
    ) -> MappingResult:
        """
        Generate the conversion functions between `layer_a` and `layer_b`.

        Args:
            entities: Entities whose functions end up in the same module.
            layer_a: First layer of the pair.
            layer_b: Second layer of the pair.
            locations: Qualified module names of the mappers that hold the
                functions of entities outside `entities`, keyed by base name.

        Returns:
            The functions per entity, A to B first, and the aggregated imports.
        """

        relevance = RelevanceFilter(layer_a, layer_b)
        local_entities = frozenset(entity.base_name for entity in entities)
        directions = [
            _Direction(source, target, relevance, local_entities, locations or {})
            for source, target in ((layer_a, layer_b), (layer_b, layer_a))
        ]

        result = MappingResult()
        for entity in entities:
            if not relevance.is_entity_relevant(entity):
                logger.debug(
                    f"[mapper] Entity {entity.base_name} is not converted between "
                    f"{layer_a.value} and {layer_b.value}"
                )
                continue
            methods: List[Method] = []
            for direction in directions:
                methods.extend(self._create_convert_methods(entity, direction, result.imports))
            result.procedures[entity.base_name] = methods
        return result

    def create_mapper(
        self,
        entities: Sequence[Entity],
        grouping: Optional[str],
        mapper_type: MapperType,
        locations: Mapping[str, str] | None = None,
    ) -> Optional[SourceModule]:
        """Create the mapper module of a grouping, or None if no entity needs converting."""

        relevance = RelevanceFilter(mapper_type.first_layer, mapper_type.second_layer)
        if not any(relevance.is_entity_relevant(entity) for entity in entities):
            logger.debug(f"[mapper] No {mapper_type.mapper_name} needed for grouping {grouping or '<root>'}")
            return None

        module = SourceModule(
            package=self._layout.mapper_package_name(grouping),
            name=mapper_class_name(mapper_type, grouping),
            description=(
                f"Generated {mapper_class_name(mapper_type, grouping)} converting between "
                f"{mapper_type.first_layer.value} and {mapper_type.second_layer.value}."
            ),
        )
        logger.debug(f"[mapper] Create {module.name}")

        mapping = self.generate_mapping(entities, mapper_type.first_layer, mapper_type.second_layer, locations)
        for method in mapping.methods():
            module.add_method(method)
        for qualified_name in sorted(mapping.imports):
            module.add_import(qualified_name)
        return module

    def mapper_locations(
        self,
        entities_by_grouping: Mapping[Optional[str], Iterable[Entity]],
        mapper_type: MapperType,
    ) -> Dict[str, str]:
        """Qualified mapper module of every entity, keyed by base name."""

        locations: Dict[str, str] = {}
        for grouping, entities in entities_by_grouping.items():
            module = join_package(
                self._layout.mapper_package_name(grouping),
                to_snake_case(mapper_class_name(mapper_type, grouping)),
            )
            for entity in entities:
                locations.setdefault(entity.base_name, module)
        return locations

    # Method creation ----------------------------------------------------------------
    def _create_convert_methods(self, entity: Entity, direction: _Direction, imports: Set[str]) -> List[Method]:
        imports.add(self._layout.qualified_class(self._graph, entity, direction.source))
        imports.add(self._layout.qualified_class(self._graph, entity, direction.target))
        imports.add(IDENTIFY_IMPORT)
        imports.add(OPTIONAL_IMPORT)

        owning_refs = [ref for ref in entity.parent_refs if ref.is_owner and not ref.is_list]
        name_counts = Counter(ref.reference_name for ref in owning_refs)

        methods: List[Method] = []
        for reference_to_parent in owning_refs:
            qualified = name_counts[reference_to_parent.reference_name] > 1
            methods.extend(
                self._create_convert_with_parent(entity, reference_to_parent, direction, imports, qualified)
            )

        methods.extend(self._create_convert_base(entity, direction, imports))
        return methods

    def _create_convert_with_parent(
        self,
        entity: Entity,
        reference_to_parent: Reference,
        direction: _Direction,
        imports: Set[str],
        qualified: bool = False,
    ) -> List[Method]:
        parent = self._graph.real_target_entity(reference_to_parent)
        if parent is None or not direction.relevance.is_entity_relevant(parent):
            logger.debug(
                f"[mapper] No connection is generated to parent {reference_to_parent.target_entity} "
                f"from entity {entity.base_name}"
            )
            return []

        imports.add(self._layout.qualified_class(self._graph, parent, direction.target))
        source_parameter = _parameter_name(entity)
        source_type = self._layout.class_name(entity, direction.source)
        target_type = self._layout.class_name(entity, direction.target)
        parent_type = self._layout.class_name(parent, direction.target)
        mapped_name = convert_function_name(
            entity, direction.target, parent_ref=reference_to_parent, qualified=qualified, mapped=True
        )

        convert_method = Method(
            name=convert_function_name(entity, direction.target, parent_ref=reference_to_parent, qualified=qualified),
            return_type=f"Optional[{target_type}]",
            docstring=f"Convert {source_type} to {target_type} and set it as {reference_to_parent.reference_name} of parent.",
        )
        convert_method.add_parameter(source_type, source_parameter)
        convert_method.add_parameter(parent_type, PARENT_PARAMETER)
        convert_method.add_line("return %s(%s, %s, {})", mapped_name, source_parameter, PARENT_PARAMETER)

        convert_method_with_map = Method(name=mapped_name, return_type=f"Optional[{target_type}]")
        convert_method_with_map.add_parameter(source_type, source_parameter)
        convert_method_with_map.add_parameter(parent_type, PARENT_PARAMETER)
        convert_method_with_map.add_parameter(MAPPED_OBJECTS_TYPE, MAPPED_OBJECTS_PARAMETER)
        convert_method_with_map.add_line(
            "result = %s(%s, %s)",
            convert_function_name(entity, direction.target, mapped=True),
            source_parameter,
            MAPPED_OBJECTS_PARAMETER,
        )
        convert_method_with_map.add_line("if result is not None:")
        convert_method_with_map.add_line(
            "%s%s.%s = result", TAB, PARENT_PARAMETER, reference_to_parent.reference_name
        )
        convert_method_with_map.add_line(RETURN_RESULT_TEXT)

        return [convert_method, convert_method_with_map]

    def _create_convert_base(self, entity: Entity, direction: _Direction, imports: Set[str]) -> List[Method]:
        source_parameter = _parameter_name(entity)
        source_type = self._layout.class_name(entity, direction.source)
        target_type = self._layout.class_name(entity, direction.target)
        mapped_name = convert_function_name(entity, direction.target, mapped=True)

        convert_method = Method(
            name=convert_function_name(entity, direction.target),
            return_type=f"Optional[{target_type}]",
            docstring=f"Convert {source_type} to {target_type}.",
        )
        convert_method.add_parameter(source_type, source_parameter)
        convert_method.add_line("return %s(%s, {})", mapped_name, source_parameter)

        convert_method_with_map = Method(name=mapped_name, return_type=f"Optional[{target_type}]")
        convert_method_with_map.add_parameter(source_type, source_parameter)
        convert_method_with_map.add_parameter(MAPPED_OBJECTS_TYPE, MAPPED_OBJECTS_PARAMETER)
        convert_method_with_map.add_line("if %s is None:", source_parameter)
        convert_method_with_map.add_line("%sreturn None", TAB)
        convert_method_with_map.add_empty_line()
        convert_method_with_map.add_line("identification = identify(%s)", source_parameter)
        convert_method_with_map.add_line("if identification in %s:", MAPPED_OBJECTS_PARAMETER)
        convert_method_with_map.add_line("%sreturn %s[identification]", TAB, MAPPED_OBJECTS_PARAMETER)
        convert_method_with_map.add_empty_line()

        convert_method_with_map.add_line("result = %s()", target_type)
        convert_method_with_map.add_line(
            'result.identification = getattr(%s, "identification", None)', source_parameter
        )
        self._add_field_mappings(convert_method_with_map, entity, direction, source_parameter)
        # Back references reached from here on resolve to this result
        convert_method_with_map.add_line("%s[identification] = result", MAPPED_OBJECTS_PARAMETER)

        single_references = [reference for reference in entity.references if not reference.is_list]
        if single_references:
            convert_method_with_map.add_empty_line()
        for reference in single_references:
            self._add_single_reference_mapping(
                convert_method_with_map, entity, reference, direction, source_parameter, imports
            )

        convert_method_with_map.add_empty_line()
        convert_method_with_map.add_line(RETURN_RESULT_TEXT)

        return [convert_method, convert_method_with_map]

    def _add_field_mappings(
        self,
        method: Method,
        entity: Entity,
        direction: _Direction,
        source_parameter: str,
    ) -> None:
        for field_ir in entity.fields:
            if not direction.relevance.is_field_relevant(field_ir):
                logger.debug(
                    f"[mapper] Field {entity.base_name}.{field_ir.field_name} is not mapped to {direction.target.value}"
                )
                continue
            method.add_line("result.%s = %s.%s", field_ir.field_name, source_parameter, field_ir.field_name)

    def _add_single_reference_mapping(
        self,
        method: Method,
        entity: Entity,
        reference: Reference,
        direction: _Direction,
        source_parameter: str,
        imports: Set[str],
    ) -> None:
        target_entity = self._graph.real_target_entity(reference)
        if target_entity is None or not direction.relevance.is_entity_relevant(target_entity):
            logger.debug(
                f"[mapper] Reference {entity.base_name}.{reference.reference_name} to "
                f"{reference.target_entity} is not mapped to {direction.target.value}"
            )
            return

        function_name = convert_function_name(target_entity, direction.target, mapped=True)
        if target_entity.base_name not in direction.local_entities:
            module = direction.locations.get(target_entity.base_name)
            if module:
                imports.add(join_package(module, function_name))
        method.add_line(
            "result.%s = %s(%s.%s, %s)",
            reference.reference_name,
            function_name,
            source_parameter,
            reference.reference_name,
            MAPPED_OBJECTS_PARAMETER,
        )
