"""
Pydantic schema of model definition documents.

Documents use camelCase keys::

    {
      "basePackage": "sample",
      "groupings": [
        {"groupingPackage": "content", "entities": [
          {"baseName": "Root", "models": "DTO_DOMAIN",
           "fields": [{"fieldName": "description", "type": "str"}],
           "references": [{"referenceName": "sub", "targetEntity": "Sub", "isOwner": true}],
           "versions": [{"versionId": "v1", "removedFieldNames": ["description"]}]}
        ]}
      ]
    }
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from layergen.generator.naming import PackageLayout
from layergen.ir.models import Models


def _check_models(value: Optional[str]) -> Optional[str]:
    if value is not None:
        Models.parse(value)
    return value


class _Definition(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class FieldDefinition(_Definition):
    field_name: str = Field(..., alias="fieldName")
    field_type: str = Field("str", alias="type")
    models: Optional[str] = None
    short_description: Optional[str] = Field(None, alias="shortDescription")

    @field_validator("models")
    @classmethod
    def _validate_models(cls, value: Optional[str]) -> Optional[str]:
        return _check_models(value)


class ReferenceDefinition(_Definition):
    reference_name: str = Field(..., alias="referenceName")
    target_entity: str = Field(..., alias="targetEntity")
    is_owner: bool = Field(False, alias="isOwner")
    is_list: bool = Field(False, alias="isList")
    short_description: Optional[str] = Field(None, alias="shortDescription")


class VersionDefinition(_Definition):
    version_id: Optional[str] = Field(None, alias="versionId")
    version_name: Optional[str] = Field(None, alias="versionName")
    base_version_id: Optional[str] = Field(None, alias="baseVersionId")
    added_fields: Optional[List[FieldDefinition]] = Field(None, alias="addedFields")
    added_references: Optional[List[ReferenceDefinition]] = Field(None, alias="addedReferences")
    removed_field_names: Optional[List[str]] = Field(None, alias="removedFieldNames")
    removed_reference_names: Optional[List[str]] = Field(None, alias="removedReferenceNames")


class EntityDefinition(_Definition):
    base_name: str = Field(..., alias="baseName")
    description: Optional[str] = None
    models: Optional[str] = None
    derived_from: Optional[str] = Field(None, alias="derivedFrom")
    fields: List[FieldDefinition] = Field(default_factory=list)
    references: List[ReferenceDefinition] = Field(default_factory=list)
    versions: List[VersionDefinition] = Field(default_factory=list)

    @field_validator("models")
    @classmethod
    def _validate_models(cls, value: Optional[str]) -> Optional[str]:
        return _check_models(value)


class GroupingDefinition(_Definition):
    grouping_package: str = Field(..., alias="groupingPackage")
    entities: List[EntityDefinition] = Field(default_factory=list)


class ModelDefinition(_Definition):
    """Root of a definition document."""

    base_package: str = Field("", alias="basePackage")
    dao_package: str = Field("dao", alias="daoPackage")
    dto_package: str = Field("dto", alias="dtoPackage")
    domain_package: str = Field("domain", alias="domainPackage")
    mapper_package: str = Field("mapper", alias="mapperPackage")
    entities: List[EntityDefinition] = Field(default_factory=list)
    groupings: List[GroupingDefinition] = Field(default_factory=list)

    @classmethod
    def from_file(cls, path: Path) -> "ModelDefinition":
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))

    def package_layout(self) -> PackageLayout:
        return PackageLayout(
            base_package=self.base_package,
            dao_package=self.dao_package,
            dto_package=self.dto_package,
            domain_package=self.domain_package,
            mapper_package=self.mapper_package,
        )
