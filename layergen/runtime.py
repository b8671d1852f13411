"""
Runtime helpers imported by generated mapper modules.
"""

from __future__ import annotations

from typing import Hashable, Tuple


def identify(obj: object) -> Tuple[str, Hashable]:
    """
    Return the key under which a converted object is registered.

    Objects carrying an `identification` are keyed by it; all others by their
    object identity, which is stable for the duration of one conversion call.
    """

    identification = getattr(obj, "identification", None)
    if identification is None:
        return type(obj).__name__, id(obj)
    return type(obj).__name__, identification
