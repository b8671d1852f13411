"""
IR model definitions for layergen.

These dataclasses hold the entity model a generation run works on. Entities
own their fields, references and versions; references name their target
entity instead of embedding it, and the `ModelGraph` resolves those names.
The graph is assembled once by the builder and is read-only afterwards.
"""

from __future__ import annotations

import keyword
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional

if TYPE_CHECKING:
    from layergen.ir.version import Version

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_MODELS_SEPARATOR = re.compile(r"[_,\s]+")


class Layer(str, Enum):
    """Representation contexts an entity may participate in."""

    DAO = "dao"
    DTO = "dto"
    DOMAIN = "domain"

    @property
    def postfix(self) -> str:
        """Class name postfix of the layer's generated classes."""

        return _LAYER_POSTFIXES[self]


_LAYER_POSTFIXES = {Layer.DAO: "Dao", Layer.DTO: "Dto", Layer.DOMAIN: ""}


def parse_element_id(entity_name: str, *segments: str) -> str:
    """
    Construct a stable synthetic identifier for model elements.

    Args:
        entity_name: Base name of the entity the element belongs to.
        *segments: Remaining segments (e.g. field, reference or version).

    Returns:
        Canonical identifier string.
    """

    normalized = [entity_name.strip()]
    normalized.extend(segment.strip() for segment in segments if segment)
    return "/".join(normalized)


def join_package(*segments: Optional[str]) -> str:
    """Join dotted package segments, ignoring empty ones."""

    return ".".join(segment.strip(".") for segment in segments if segment and segment.strip("."))


def to_snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name.strip()).lower()


def is_identifier(name: str) -> bool:
    """True if `name` can be used as an attribute or class name in generated code."""

    return name.isidentifier() and not keyword.iskeyword(name)


def upper_first(text: str) -> str:
    return text[:1].upper() + text[1:]


@dataclass(frozen=True)
class Models:
    """Flags telling which layers an entity or a field is present in."""

    dao: bool = False
    dto: bool = False
    domain: bool = False

    @classmethod
    def parse(cls, text: str) -> "Models":
        """
        Parse declarations such as ``"DTO_DOMAIN"`` or ``"dao, domain"``.

        Raises:
            ValueError: if the declaration is empty or names an unknown layer.
        """

        tokens = [token for token in _MODELS_SEPARATOR.split(text.strip().lower()) if token]
        if not tokens:
            raise ValueError("Models declaration is empty")
        known = {layer.value for layer in Layer}
        unknown = [token for token in tokens if token not in known]
        if unknown:
            raise ValueError(f"Unknown layer(s) {', '.join(unknown)} in models declaration {text!r}")
        return cls(**{token: True for token in tokens})

    def includes(self, layer: Layer) -> bool:
        return getattr(self, layer.value)


@dataclass(slots=True, eq=False)
class Field:
    """A simple valued attribute of an entity."""

    field_name: str
    field_type: str
    models: Optional[Models] = None
    short_description: Optional[str] = None

    def is_valid(self, messages: List[str]) -> bool:
        result = True
        if not self.field_name:
            messages.append("The field name is not set")
            result = False
        elif not is_identifier(self.field_name):
            messages.append(f"The field name {self.field_name} is not a valid Python identifier")
            result = False
        if not self.field_type:
            messages.append(f"The type of field {self.field_name} is not set")
            result = False
        return result


@dataclass(slots=True, eq=False)
class Reference:
    """
    Outbound reference of an entity to another entity.

    `is_owner` marks the source entity (`parent`) as the owner of the target,
    which makes the target a dependent child of the source. `is_list` marks a
    one-to-many relation seen from the source.
    """

    reference_name: str
    target_entity: str
    is_owner: bool = False
    is_list: bool = False
    parent: Optional[str] = None
    short_description: Optional[str] = None

    def is_valid(self, messages: List[str]) -> bool:
        result = True
        if not self.reference_name:
            messages.append(f"The reference name at entity {self.parent} is not set")
            result = False
        elif not is_identifier(self.reference_name):
            messages.append(
                f"The reference name {self.reference_name} at entity {self.parent} is not a valid Python identifier"
            )
            result = False
        if not self.target_entity:
            messages.append(f"The target entity of reference {self.reference_name} is not set")
            result = False
        return result

    def to_parent_ref(self) -> "Reference":
        """Return the reference as seen from its target: pointing back at the owning parent."""

        return Reference(
            reference_name=self.reference_name,
            target_entity=self.parent or "",
            is_owner=self.is_owner,
            is_list=self.is_list,
            parent=self.target_entity,
            short_description=self.short_description,
        )


@dataclass(slots=True, eq=False)
class Entity:
    """An entity of the model, the unit of generation."""

    base_name: str
    description: Optional[str] = None
    models: Optional[Models] = None
    grouping: Optional[str] = None
    derived_from: Optional[str] = None
    version_of: Optional[str] = None
    fields: List[Field] = field(default_factory=list)
    references: List[Reference] = field(default_factory=list)
    parent_refs: List[Reference] = field(default_factory=list)
    versions: List["Version"] = field(default_factory=list)

    def element_id(self) -> str:
        return parse_element_id(self.base_name)

    def add_field(self, field_ir: Field) -> None:
        self.fields.append(field_ir)

    def add_reference(self, reference: Reference) -> None:
        if reference.parent is None:
            reference.parent = self.base_name
        self.references.append(reference)

    def add_version(self, version: "Version") -> None:
        self.versions.append(version)

    def find_version(self, version_id: Optional[str]) -> Optional["Version"]:
        for version in self.versions:
            if version.version_id == version_id:
                return version
        return None

    def is_valid(self, messages: List[str]) -> bool:
        result = True
        if not self.base_name:
            messages.append("The base name of an entity is not set")
            result = False
        elif not is_identifier(self.base_name):
            messages.append(f"The base name {self.base_name} is not a valid Python identifier")
            result = False

        duplicates = _duplicates(field_ir.field_name for field_ir in self.fields)
        if duplicates:
            messages.append(f"The fields {', '.join(duplicates)} are declared more than once at entity {self.base_name}")
            result = False
        duplicates = _duplicates(reference.reference_name for reference in self.references)
        if duplicates:
            messages.append(
                f"The references {', '.join(duplicates)} are declared more than once at entity {self.base_name}"
            )
            result = False
        duplicates = _duplicates(version.version_id for version in self.versions if version.version_id)
        if duplicates:
            messages.append(f"The versions {', '.join(duplicates)} are declared more than once at entity {self.base_name}")
            result = False

        # All elements are checked, also after a failure
        result = all([field_ir.is_valid(messages) for field_ir in self.fields]) and result
        result = all([reference.is_valid(messages) for reference in self.references]) and result
        result = all([version.is_valid(messages, self) for version in self.versions]) and result
        return result


@dataclass
class ModelGraph:
    """
    Arena holding all entities of a model, keyed by base name.

    References store names only, so cyclic relations between entities never
    turn into cyclic object ownership.
    """

    entities: Dict[str, Entity] = field(default_factory=dict)
    duplicate_names: List[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.entities.values())

    def __len__(self) -> int:
        return len(self.entities)

    def register(self, entity: Entity) -> None:
        if entity.base_name in self.entities:
            logger.warning(f"[graph] Entity {entity.base_name} is already registered, ignoring the duplicate")
            self.duplicate_names.append(entity.base_name)
            return
        self.entities[entity.base_name] = entity

    def get(self, name: Optional[str]) -> Optional[Entity]:
        if not name:
            return None
        return self.entities.get(name)

    def link_parent_refs(self) -> None:
        """Populate `Entity.parent_refs` from the owning references of all entities."""

        for entity in self:
            entity.parent_refs.clear()
        for entity in self:
            for reference in entity.references:
                if not reference.is_owner:
                    continue
                target = self.get(reference.target_entity)
                if target is not None:
                    target.parent_refs.append(reference.to_parent_ref())

    def real_entity(self, entity: Optional[Entity]) -> Optional[Entity]:
        """Follow `derived_from` links to the entity whose classes are actually used."""

        visited = set()
        while entity is not None and entity.derived_from and entity.base_name not in visited:
            visited.add(entity.base_name)
            derived = self.get(entity.derived_from)
            if derived is None:
                break
            entity = derived
        return entity

    def real_target_entity(self, reference: Reference) -> Optional[Entity]:
        return self.real_entity(self.get(reference.target_entity))

    def package_of(self, entity: Entity) -> str:
        """
        Determine the grouping package of an entity.

        Entities without an explicit grouping are placed next to their owning
        parent. Version snapshots share the package of the versioned entity.
        """

        visited = set()
        current: Optional[Entity] = entity
        while current is not None and current.base_name not in visited:
            visited.add(current.base_name)
            if current.grouping is not None:
                return current.grouping
            if current.version_of:
                current = self.get(current.version_of)
                continue
            owner = next((ref for ref in current.parent_refs if ref.is_owner), None)
            current = self.get(owner.target_entity) if owner else None
        return ""

    def version_snapshots(self, entity: Entity) -> List[Entity]:
        """Resolve every version of the entity into a standalone snapshot entity."""

        return [version.resolve(entity) for version in entity.versions]

    def is_valid(self, messages: List[str]) -> bool:
        result = True
        for name in self.duplicate_names:
            messages.append(f"The entity {name} is declared more than once")
            result = False

        for entity in self:
            result = entity.is_valid(messages) and result
            if entity.derived_from and self.get(entity.derived_from) is None:
                messages.append(f"The entity {entity.derived_from} derived by {entity.base_name} does not exist")
                result = False
            for reference in entity.references:
                if reference.target_entity and self.get(reference.target_entity) is None:
                    messages.append(
                        f"The target entity {reference.target_entity} of reference "
                        f"{entity.base_name}.{reference.reference_name} does not exist"
                    )
                    result = False
        return result


def _duplicates(names: Iterable[str]) -> List[str]:
    seen = set()
    duplicates: List[str] = []
    for name in names:
        if name in seen and name not in duplicates:
            duplicates.append(name)
        seen.add(name)
    return duplicates


def iter_versions(entities: Iterable[Entity]) -> Iterable["Version"]:
    """Yield all versions declared by a collection of entities."""

    for entity in entities:
        yield from entity.versions
