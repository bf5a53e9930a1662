"""
Display-list timeline compiler.

Components, leaves first:
    characters  classify(commands) -> CharacterTable
    timeline    build_timeline(commands) -> Timeline
    resolver    resolve(table) -> {sprite id: Animation}
    splitter    split(time_lines, labels, total_frames) -> {name: Animation}
    assembler   assemble(...) -> AnimationDocument
    pipeline    compile_movie(movie, options) -> AnimationDocument
"""

from .characters import Character, CharacterKind, CharacterTable, classify
from .timeline import Label, LiveObject, Timeline, TimelineState, build_timeline, finish, step
from .resolver import SubAnimationResolver, check_sprite_graph, flatten_root_transform, resolve
from .splitter import DEFAULT_ANIMATION, label_intervals, split
from .assembler import assemble, scale_animation, scale_span
from .pipeline import CompileOptions, compile_movie

__all__ = [
    # Character table
    'Character',
    'CharacterKind',
    'CharacterTable',
    'classify',
    # Timeline builder
    'Label',
    'LiveObject',
    'Timeline',
    'TimelineState',
    'build_timeline',
    'finish',
    'step',
    # Sub-animation resolver
    'SubAnimationResolver',
    'check_sprite_graph',
    'flatten_root_transform',
    'resolve',
    # Splitter
    'DEFAULT_ANIMATION',
    'label_intervals',
    'split',
    # Assembler
    'assemble',
    'scale_animation',
    'scale_span',
    # Pipeline
    'CompileOptions',
    'compile_movie',
]
