"""
FastAPI application exposing layergen validation, version resolution and
source generation.
"""

from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException

from layergen.api.models import GenerationResponse, ResolvedVersion, ResolveRequest, ValidationResponse
from layergen.api.queries import ModelQueryService
from layergen.config import GeneratorSettings, load_generator_settings
from layergen.pipeline import GenerationPipeline, ModelDefinition


def create_app(settings: GeneratorSettings | None = None) -> FastAPI:
    settings = settings or load_generator_settings()
    app = FastAPI(title="layergen API", version="0.1.0")
    app.state.query_service = ModelQueryService(GenerationPipeline(settings=settings))

    def get_service() -> ModelQueryService:
        service = getattr(app.state, "query_service", None)
        if service is None:
            raise RuntimeError("Query service not initialized")
        return service

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/validate", response_model=ValidationResponse)
    def validate(
        body: ModelDefinition,
        service: ModelQueryService = Depends(get_service),
    ) -> ValidationResponse:
        return service.validate(body)

    @app.post("/resolve", response_model=ResolvedVersion)
    def resolve(
        body: ResolveRequest,
        service: ModelQueryService = Depends(get_service),
    ) -> ResolvedVersion:
        try:
            return service.resolve_version(body.model, entity_name=body.entity_name, version_id=body.version_id)
        except LookupError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.post("/mappers", response_model=GenerationResponse)
    def mappers(
        body: ModelDefinition,
        service: ModelQueryService = Depends(get_service),
    ) -> GenerationResponse:
        response = service.generate_sources(body)
        if not response.valid:
            raise HTTPException(status_code=422, detail=response.messages)
        return response

    return app
