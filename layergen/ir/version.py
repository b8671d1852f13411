"""
Entity versions and their resolution.

A version describes its field and reference set as a delta against a base
version of the same entity, or against the entity itself when no base is
declared:

    effective = (base set + added items) - removed names

Removal is evaluated after the union, so an added item sharing a removed
name never survives.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, FrozenSet, List, Optional, Sequence, TypeVar, Union

from layergen.ir.models import Entity, Field, Reference, upper_first

_Item = TypeVar("_Item", Field, Reference)

_FIELDS = "fields"
_REFERENCES = "references"


@dataclass(slots=True, eq=False)
class Version:
    """One evolution step of an entity."""

    version_id: Optional[str]
    version_name: Optional[str] = None
    base_version_id: Optional[str] = None
    added_fields: Optional[List[Field]] = None
    added_references: Optional[List[Reference]] = None
    removed_field_names: Optional[List[str]] = None
    removed_reference_names: Optional[List[str]] = None

    def find_base_version(self, parent_entity: Entity) -> Optional["Version"]:
        if not self.base_version_id:
            return None
        return parent_entity.find_version(self.base_version_id)

    def determine_fields(self, parent_entity: Entity) -> List[Field]:
        """Effective fields of this version. Base versions are resolved again on every call."""

        return self._determine(parent_entity, _FIELDS, frozenset())

    def determine_references(self, parent_entity: Entity) -> List[Reference]:
        """Effective references of this version. Base versions are resolved again on every call."""

        return self._determine(parent_entity, _REFERENCES, frozenset())

    def generate_version_name(self, parent_entity: Entity) -> None:
        """Derive the version name from the entity name unless one is set already."""

        if self.version_name is not None or not self.version_id:
            return
        self.version_name = self._derive_name(parent_entity)

    def resolve(self, parent_entity: Entity) -> Entity:
        """
        Build the snapshot entity of this version.

        The snapshot carries the effective fields and references and is named
        by the version name. It shares layer participation and grouping with
        the versioned entity and does not take part in parent linking.
        """

        return Entity(
            base_name=self.version_name or self._derive_name(parent_entity),
            description=parent_entity.description,
            models=parent_entity.models,
            grouping=parent_entity.grouping,
            derived_from=parent_entity.derived_from,
            version_of=parent_entity.base_name,
            fields=self.determine_fields(parent_entity),
            references=self.determine_references(parent_entity),
        )

    def is_valid(self, messages: List[str], parent_entity: Entity) -> bool:
        """
        Check the version against its parent entity.

        Every problem appends one message. All checks run, even after a
        failure, so that a single call reports everything.
        """

        result = True
        if not self.version_id:
            messages.append(f"The version id of a version at entity {parent_entity.base_name} is not set")
            result = False

        if self.version_name is not None and not self.version_name:
            messages.append(f"The version name of version {self.version_id} is empty")
            result = False

        result = _all_valid(self.added_fields, messages) and result
        result = _all_valid(self.added_references, messages) and result

        if self.base_version_id:
            if self.find_base_version(parent_entity) is None:
                messages.append(
                    f"The base version {self.base_version_id} of version {self.version_id} "
                    f"does not exist at entity {parent_entity.base_name}"
                )
                result = False
            elif self._has_cyclic_base(parent_entity):
                messages.append(f"The base versions of version {self.version_id} form a cycle")
                result = False

        missing = _missing_names(self.removed_field_names, self._base_items(parent_entity, _FIELDS))
        if missing:
            messages.append(
                f"The fields {', '.join(missing)} to remove at version {self.version_id} "
                f"are not contained by its base"
            )
            result = False

        missing = _missing_names(self.removed_reference_names, self._base_items(parent_entity, _REFERENCES))
        if missing:
            messages.append(
                f"The references {', '.join(missing)} to remove at version {self.version_id} "
                f"are not contained by its base"
            )
            result = False

        return result

    # Resolution helpers -----------------------------------------------------------
    def _determine(self, parent_entity: Entity, kind: str, visited: FrozenSet[Optional[str]]) -> list:
        visited = visited | {self.version_id}
        base_items = self._base_items(parent_entity, kind, visited)
        if kind == _FIELDS:
            return _apply_delta(base_items, self.added_fields, self.removed_field_names)
        return _apply_delta(base_items, self.added_references, self.removed_reference_names)

    def _base_items(
        self,
        parent_entity: Entity,
        kind: str,
        visited: Optional[FrozenSet[Optional[str]]] = None,
    ) -> list:
        visited = visited if visited is not None else frozenset({self.version_id})
        base_version = self.find_base_version(parent_entity)
        if base_version is not None and base_version.version_id not in visited:
            return base_version._determine(parent_entity, kind, visited)
        return list(getattr(parent_entity, kind))

    def _has_cyclic_base(self, parent_entity: Entity) -> bool:
        seen = {self.version_id}
        current = self.find_base_version(parent_entity)
        while current is not None:
            if current.version_id in seen:
                return True
            seen.add(current.version_id)
            current = current.find_base_version(parent_entity)
        return False

    def _derive_name(self, parent_entity: Entity) -> str:
        return parent_entity.base_name + upper_first(self.version_id or "")


def _name_of(item: Union[Field, Reference]) -> str:
    if isinstance(item, Field):
        return item.field_name
    return item.reference_name


def _apply_delta(
    base_items: Sequence[_Item],
    added: Optional[Sequence[_Item]],
    removed_names: Optional[Sequence[str]],
) -> List[_Item]:
    combined: List[_Item] = []
    seen = set()
    for item in [*base_items, *(added or [])]:
        if id(item) not in seen:
            seen.add(id(item))
            combined.append(item)
    removed: AbstractSet[str] = set(removed_names or [])
    return [item for item in combined if _name_of(item) not in removed]


def _missing_names(names: Optional[Sequence[str]], items: Sequence[Union[Field, Reference]]) -> List[str]:
    available = {_name_of(item) for item in items}
    return [name for name in names or [] if name not in available]


def _all_valid(items: Optional[Sequence[Union[Field, Reference]]], messages: List[str]) -> bool:
    return all([item.is_valid(messages) for item in items or []])
