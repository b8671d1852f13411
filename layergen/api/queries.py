"""
Model queries exposed via the layergen API.
"""

from __future__ import annotations

from layergen.api.models import GeneratedSource, GenerationResponse, ResolvedVersion, ValidationResponse
from layergen.ir.models import iter_versions
from layergen.pipeline import GenerationPipeline, ModelBuilder, ModelDefinition


class ModelQueryService:
    """Runs the builder and the generation pipeline behind the REST API endpoints."""

    def __init__(self, pipeline: GenerationPipeline, builder: ModelBuilder | None = None) -> None:
        self._pipeline = pipeline
        self._builder = builder or ModelBuilder()

    # Public API ------------------------------------------------------------------
    def validate(self, definition: ModelDefinition) -> ValidationResponse:
        graph = self._builder.build(definition)
        messages: list[str] = []
        valid = graph.is_valid(messages)
        return ValidationResponse(
            valid=valid,
            messages=messages,
            entityCount=len(graph),
            versionCount=sum(1 for _ in iter_versions(graph)),
        )

    def resolve_version(self, definition: ModelDefinition, *, entity_name: str, version_id: str) -> ResolvedVersion:
        graph = self._builder.build(definition)
        entity = graph.get(entity_name)
        if entity is None:
            raise LookupError(f"Entity {entity_name} not found")
        version = entity.find_version(version_id)
        if version is None:
            raise LookupError(f"Version {version_id} not found at entity {entity_name}")

        snapshot = version.resolve(entity)
        return ResolvedVersion(
            entityName=entity.base_name,
            versionId=version_id,
            versionName=snapshot.base_name,
            baseVersionId=version.base_version_id,
            fieldNames=[field_ir.field_name for field_ir in snapshot.fields],
            referenceNames=[reference.reference_name for reference in snapshot.references],
        )

    def generate_sources(self, definition: ModelDefinition) -> GenerationResponse:
        result = self._pipeline.generate(definition)
        return GenerationResponse(
            valid=result.valid,
            messages=result.messages,
            sources=[
                GeneratedSource(
                    module=module.qualified_name,
                    path=module.relative_path.as_posix(),
                    source=module.render(),
                )
                for module in result.modules
            ],
        )
