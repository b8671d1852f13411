"""
layergen package root.

Provides the entity model with layers and versions (IR), the generators that
turn it into mapper and object factory modules, the generation pipeline, and
the Neo4j export and HTTP API built on top of them.
"""

__all__ = ["ir", "generator", "pipeline", "graph", "config"]
