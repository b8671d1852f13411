"""
Pydantic models for layergen API requests and responses.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from layergen.pipeline.definition import ModelDefinition


class ValidationResponse(BaseModel):
    valid: bool
    messages: list[str]
    entityCount: int
    versionCount: int


class ResolveRequest(BaseModel):
    model: ModelDefinition
    entity_name: str = Field(..., alias="entityName")
    version_id: str = Field(..., alias="versionId")


class ResolvedVersion(BaseModel):
    entityName: str
    versionId: str
    versionName: str
    baseVersionId: str | None = None
    fieldNames: list[str]
    referenceNames: list[str]


class GeneratedSource(BaseModel):
    module: str
    path: str
    source: str


class GenerationResponse(BaseModel):
    valid: bool
    messages: list[str]
    sources: list[GeneratedSource]
