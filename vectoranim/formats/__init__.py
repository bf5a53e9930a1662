"""vectoranim file formats.

This module contains the input (decoded movie) and output (animation
document) models and their JSON file I/O.
"""

from .document import AnimationDocument
from .source import MovieSource

__all__ = [
    'AnimationDocument',
    'MovieSource',
]
