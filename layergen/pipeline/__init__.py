"""
Generation pipeline that turns model definition documents into mapper and
object factory modules.
"""

from .builder import ModelBuilder
from .definition import ModelDefinition
from .generate import GenerationPipeline, GenerationResult

__all__ = ["GenerationPipeline", "GenerationResult", "ModelBuilder", "ModelDefinition"]
