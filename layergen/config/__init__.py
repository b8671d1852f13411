"""
Configuration utilities for layergen.
"""

from .settings import (
    GeneratorSettings,
    Neo4jSettings,
    load_generator_settings,
    load_settings,
)

__all__ = [
    "GeneratorSettings",
    "Neo4jSettings",
    "load_generator_settings",
    "load_settings",
]
