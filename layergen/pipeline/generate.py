"""
High-level generation pipeline for layergen.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from layergen.config import GeneratorSettings
from layergen.generator import MapperType, MappingGenerator, ObjectFactoryGenerator, PackageLayout
from layergen.ir import Entity, Layer, ModelGraph
from layergen.ir.models import iter_versions
from layergen.pipeline.builder import ModelBuilder
from layergen.pipeline.definition import ModelDefinition
from layergen.sources import SourceModule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    valid: bool
    messages: List[str]
    modules: List[SourceModule]
    entities_processed: int
    versions_processed: int
    graph: Optional[ModelGraph] = field(default=None, compare=False)


class GenerationPipeline:
    """
    Coordinates building the model graph and generating mappers and object
    factories from it.
    """

    def __init__(
        self,
        *,
        settings: GeneratorSettings | None = None,
        builder: ModelBuilder | None = None,
    ) -> None:
        self._settings = settings or GeneratorSettings()
        self._builder = builder or ModelBuilder()
        self._mapper_types = _parse_mapper_types(self._settings.mapper_types)

    def generate(self, definition: ModelDefinition) -> GenerationResult:
        graph = self._builder.build(definition)
        versions_count = sum(1 for _ in iter_versions(graph))

        messages: List[str] = []
        if not graph.is_valid(messages):
            for message in messages:
                logger.warning(f"[pipeline] {message}")
            logger.warning("[pipeline] Model is invalid, no sources are generated")
            return GenerationResult(
                valid=False,
                messages=messages,
                modules=[],
                entities_processed=len(graph),
                versions_processed=versions_count,
                graph=graph,
            )

        layout = definition.package_layout()
        modules = self._generate_modules(graph, layout)
        logger.info(f"[pipeline] Generated {len(modules)} modules for {len(graph)} entities")

        return GenerationResult(
            valid=True,
            messages=messages,
            modules=modules,
            entities_processed=len(graph),
            versions_processed=versions_count,
            graph=graph,
        )

    def write(self, result: GenerationResult, output_dir: Path | None = None) -> List[Path]:
        """Write the generated modules below `output_dir` and return the written paths."""

        root = Path(output_dir or self._settings.output_dir)
        written: List[Path] = []
        packages = set()
        for module in result.modules:
            path = root / module.relative_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(module.render(), encoding="utf-8")
            written.append(path)
            packages.update(_package_dirs(root, module.relative_path))

        for package_dir in sorted(packages):
            init_file = package_dir / "__init__.py"
            if not init_file.exists():
                init_file.write_text("", encoding="utf-8")
                written.append(init_file)

        logger.info(f"[pipeline] Wrote {len(result.modules)} modules to {root}")
        return written

    def stale_files(self, result: GenerationResult, output_dir: Path | None = None) -> List[Path]:
        """Paths whose content on disk differs from the generated source."""

        root = Path(output_dir or self._settings.output_dir)
        stale: List[Path] = []
        for module in result.modules:
            path = root / module.relative_path
            if not path.is_file() or path.read_text(encoding="utf-8") != module.render():
                stale.append(path)
        return stale

    # Module generation ---------------------------------------------------------------
    def _generate_modules(self, graph: ModelGraph, layout: PackageLayout) -> List[SourceModule]:
        entities_by_grouping = _group_entities(graph)
        snapshots_by_grouping: Dict[Optional[str], List[Entity]] = defaultdict(list)
        for grouping, entities in entities_by_grouping.items():
            for entity in entities:
                snapshots_by_grouping[grouping].extend(graph.version_snapshots(entity))

        mapping_generator = MappingGenerator(graph, layout)
        factory_generator = ObjectFactoryGenerator(graph, layout)
        modules: List[SourceModule] = []

        for mapper_type in self._mapper_types:
            entities_of_type = {
                grouping: _with_snapshots(entities, snapshots_by_grouping, grouping, mapper_type.includes_versions)
                for grouping, entities in entities_by_grouping.items()
            }
            locations = mapping_generator.mapper_locations(entities_of_type, mapper_type)
            for grouping, entities in entities_of_type.items():
                module = mapping_generator.create_mapper(entities, grouping, mapper_type, locations)
                if module is not None:
                    modules.append(module)

        for grouping, entities in entities_by_grouping.items():
            for layer in Layer:
                layer_entities = _with_snapshots(entities, snapshots_by_grouping, grouping, layer is Layer.DTO)
                module = factory_generator.create_object_factory(layer_entities, layer, grouping)
                if module is not None:
                    modules.append(module)

        return modules


def _parse_mapper_types(names: Sequence[str]) -> Tuple[MapperType, ...]:
    mapper_types = []
    for name in names:
        try:
            mapper_types.append(MapperType[name.strip().upper()])
        except KeyError as exc:
            raise RuntimeError(f"Unknown mapper type {name}") from exc
    return tuple(mapper_types)


def _group_entities(graph: ModelGraph) -> Dict[Optional[str], List[Entity]]:
    grouped: Dict[Optional[str], List[Entity]] = defaultdict(list)
    for entity in graph:
        grouped[graph.package_of(entity) or None].append(entity)
    return dict(grouped)


def _with_snapshots(
    entities: List[Entity],
    snapshots_by_grouping: Dict[Optional[str], List[Entity]],
    grouping: Optional[str],
    include: bool,
) -> List[Entity]:
    if not include:
        return list(entities)
    return list(entities) + snapshots_by_grouping.get(grouping, [])


def _package_dirs(root: Path, relative_path: Path) -> List[Path]:
    dirs = []
    current = root
    for part in relative_path.parent.parts:
        current = current / part
        dirs.append(current)
    return dirs
