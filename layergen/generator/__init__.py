"""
Source generators turning the IR into Python modules.
"""

from .factory import ObjectFactoryGenerator
from .mapper import MapperType, MappingGenerator, MappingResult, convert_function_name
from .naming import PackageLayout
from .relevance import RelevanceFilter

__all__ = [
    "MapperType",
    "MappingGenerator",
    "MappingResult",
    "ObjectFactoryGenerator",
    "PackageLayout",
    "RelevanceFilter",
    "convert_function_name",
]
