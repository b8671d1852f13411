"""
Centralized application settings.

Environment variables drive configuration so that deployments can override
defaults without code changes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class GeneratorSettings:
    """Options of a generation run."""

    output_dir: Path = Path("generated")
    log_level: str = "INFO"
    mapper_types: Tuple[str, ...] = ("ACCESS", "TRANSPORT")


def load_generator_settings() -> GeneratorSettings:
    """
    Load generator configuration from environment variables.

    Optional:
        LAYERGEN_OUTPUT_DIR (defaults to \"generated\")
        LAYERGEN_LOG_LEVEL (defaults to \"INFO\")
        LAYERGEN_MAPPER_TYPES, comma separated (defaults to \"ACCESS,TRANSPORT\")
    """

    output_dir = Path(os.environ.get("LAYERGEN_OUTPUT_DIR", "generated"))
    log_level = os.environ.get("LAYERGEN_LOG_LEVEL", "INFO").strip().upper()
    mapper_types = tuple(
        name.strip().upper()
        for name in os.environ.get("LAYERGEN_MAPPER_TYPES", "ACCESS,TRANSPORT").split(",")
        if name.strip()
    )

    if log_level not in _LOG_LEVELS:
        raise RuntimeError(f"LAYERGEN_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
    if not mapper_types:
        raise RuntimeError("LAYERGEN_MAPPER_TYPES must name at least one mapper type")

    return GeneratorSettings(output_dir=output_dir, log_level=log_level, mapper_types=mapper_types)


@dataclass(frozen=True)
class Neo4jSettings:
    """Connection parameters for Neo4j."""

    uri: str
    username: str
    password: str
    database: str = "neo4j"


def load_settings() -> Neo4jSettings:
    """
    Load Neo4j configuration from environment variables.

    Required vars:
        LAYERGEN_NEO4J_URI
        LAYERGEN_NEO4J_USER
        LAYERGEN_NEO4J_PASSWORD

    Optional:
        LAYERGEN_NEO4J_DATABASE (defaults to \"neo4j\")
    """

    uri = os.environ.get("LAYERGEN_NEO4J_URI")
    username = os.environ.get("LAYERGEN_NEO4J_USER")
    password = os.environ.get("LAYERGEN_NEO4J_PASSWORD")
    database = os.environ.get("LAYERGEN_NEO4J_DATABASE", "neo4j")

    if not uri or not username or not password:
        raise RuntimeError("Neo4j configuration missing required environment variables")

    return Neo4jSettings(uri=uri, username=username, password=password, database=database)
