"""
vectoranim - Compile decoded vector-animation display lists into portable JSON animations
"""

from .model import Animation, BlendMode, ColorTransform, FrameSpan, Matrix
from .commands import (
    Command,
    DefineShape,
    DefineSprite,
    FrameLabel,
    PlaceObject,
    RemoveObject,
    ShowFrame,
    command_from_dict,
)
from .exceptions import AnimationCompileError, DuplicateCharacterIdError, MalformedStreamError
from .formats import AnimationDocument, MovieSource
from .compiler import CompileOptions, compile_movie

__version__ = "0.1.0"

__all__ = [
    # Model
    "Animation",
    "BlendMode",
    "ColorTransform",
    "FrameSpan",
    "Matrix",
    # Commands
    "Command",
    "DefineShape",
    "DefineSprite",
    "FrameLabel",
    "PlaceObject",
    "RemoveObject",
    "ShowFrame",
    "command_from_dict",
    # Errors
    "AnimationCompileError",
    "DuplicateCharacterIdError",
    "MalformedStreamError",
    # Formats
    "AnimationDocument",
    "MovieSource",
    # Compiler
    "CompileOptions",
    "compile_movie",
]
