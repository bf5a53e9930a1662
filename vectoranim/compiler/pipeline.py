"""
End-to-end compilation of a decoded movie into an AnimationDocument.

Control flow:
    commands -> classify -> resolve sprites -> build root -> split -> assemble

A run either returns a complete document or raises; nothing partial leaks out.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from vectoranim.config import Settings, settings as default_settings
from vectoranim.formats.document import AnimationDocument
from vectoranim.formats.source import MovieSource
from vectoranim.model import Matrix

from .assembler import assemble
from .characters import classify
from .resolver import flatten_root_transform, resolve
from .splitter import split
from .timeline import build_timeline

logger = logging.getLogger(__name__)


class CompileOptions(BaseModel):
    """Options of one compile run."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    scale: float = Field(default=1.0, gt=0)
    use_root_transform: bool = Field(default=False)
    # Placement of the root clip, pre-multiplied when use_root_transform is set.
    # None falls back to the movie's own root_matrix.
    root_matrix: Optional[Matrix] = Field(default=None)
    workers: int = Field(default=1, ge=1)

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> 'CompileOptions':
        config = config or default_settings
        return cls(
            scale=config.SCALE,
            use_root_transform=config.USE_ROOT_TRANSFORM,
            workers=config.WORKERS,
        )


def compile_movie(
    movie: MovieSource,
    options: Optional[CompileOptions] = None,
) -> AnimationDocument:
    """
    Compile a decoded movie.

    Args:
        movie: Name, frame rate, root command stream and root placement
        options: Compile options, defaults to CompileOptions()

    Returns:
        AnimationDocument

    Raises:
        MalformedStreamError: On undefined ids, empty-depth moves/removals or
            sprite reference cycles
        DuplicateCharacterIdError: On repeated character definitions
    """
    options = options or CompileOptions()

    table = classify(movie.commands)
    base_animations = resolve(table, workers=options.workers)

    root = build_timeline(movie.commands, table.ids())
    root_animation = root.to_animation()
    if options.use_root_transform:
        root_matrix = options.root_matrix if options.root_matrix is not None else movie.root_matrix
        root_animation = flatten_root_transform(root_animation, root_matrix)
    animations = split(root_animation.time_lines, root.labels, root_animation.total_frames)

    document = assemble(
        movie.name,
        movie.frame_rate,
        base_animations,
        animations,
        scale=options.scale,
        use_root_transform=options.use_root_transform,
    )
    logger.info(
        "Compiled %r: %d sprites, %d animations, %d root frames",
        movie.name, len(document.base_animations), len(document.animations), root.total_frames,
    )
    return document
