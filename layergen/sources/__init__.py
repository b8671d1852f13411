"""
Builders collecting generated source before it is written.
"""

from .module import TAB, Method, SourceModule

__all__ = ["TAB", "Method", "SourceModule"]
