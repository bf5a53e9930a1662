"""
Animation data model.

Pydantic models for the values that flow through the compiler and end up in
the output document:

    Matrix, ColorTransform, BlendMode   (transform.py)
    FrameSpan, Animation                (animation.py)

The document root lives in vectoranim.formats.AnimationDocument.
"""

from .transform import BlendMode, ColorTransform, Matrix
from .animation import Animation, FrameSpan

__all__ = [
    'Animation',
    'BlendMode',
    'ColorTransform',
    'FrameSpan',
    'Matrix',
]
