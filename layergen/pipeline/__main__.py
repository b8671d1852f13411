"""
Command line entry point for the layergen generation pipeline.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Iterable

from layergen.config import load_generator_settings, load_settings
from layergen.graph import GraphLoader
from layergen.pipeline import GenerationPipeline, ModelDefinition

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate layer mappers and object factories from entity model definitions."
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="One or more JSON model definitions, or directories containing them.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory receiving the generated packages. Defaults to LAYERGEN_OUTPUT_DIR.",
    )
    parser.add_argument(
        "--check-only",
        action="store_true",
        help="Do not write anything; fail if generated files differ from those on disk.",
    )
    parser.add_argument(
        "--sync-graph",
        action="store_true",
        help="Also export the model into Neo4j using the LAYERGEN_NEO4J_* settings.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"),
        help="Logging level, overriding LAYERGEN_LOG_LEVEL.",
    )
    return parser


def resolve_inputs(inputs: Iterable[Path]) -> list[Path]:
    resolved: list[Path] = []
    for input_path in inputs:
        if input_path.is_dir():
            resolved.extend(sorted(path for path in input_path.rglob("*.json") if path.is_file()))
            continue
        if not input_path.exists():
            raise FileNotFoundError(f"{input_path} does not exist")
        resolved.append(input_path)

    if not resolved:
        raise RuntimeError("No model definitions found")

    # Deduplicate while preserving order
    ordered_unique: dict[Path, None] = {}
    for path in resolved:
        ordered_unique.setdefault(path, None)
    return list(ordered_unique.keys())


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_generator_settings()
    if args.output_dir is not None:
        settings = dataclasses.replace(settings, output_dir=args.output_dir)
    if args.log_level:
        settings = dataclasses.replace(settings, log_level=args.log_level)
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    pipeline = GenerationPipeline(settings=settings)
    exit_code = 0
    for path in resolve_inputs(args.paths):
        logger.info(f"[pipeline] Processing {path}")
        result = pipeline.generate(ModelDefinition.from_file(path))
        if not result.valid:
            for message in result.messages:
                print(f"{path}: {message}", file=sys.stderr)
            exit_code = 1
            continue

        if args.check_only:
            stale = pipeline.stale_files(result)
            for stale_path in stale:
                print(f"{stale_path} is out of date", file=sys.stderr)
            if stale:
                exit_code = 1
        else:
            pipeline.write(result)

        if args.sync_graph and result.graph is not None:
            loader = GraphLoader(settings=load_settings())
            try:
                loader.sync_model(result.graph)
            finally:
                loader.close()

        print(
            f"{path}: {result.entities_processed} entities, "
            f"{result.versions_processed} versions, "
            f"{len(result.modules)} modules."
        )
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
