"""
HTTP API of layergen.
"""

from .server import create_app

__all__ = ["create_app"]
