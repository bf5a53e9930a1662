"""
Timeline builder: folds one character's command stream into per-depth spans.

The fold threads an immutable TimelineState through ``step()``. Each step
returns the next state plus the spans it closed, so every command can be
tested in isolation:

    state = TimelineState()
    for command in commands:
        state, closed = step(state, command)
    state, closed = finish(state)

Span rules:
- Any PlaceObject carrying a character id closes the live span and opens a
  new one, even when it re-places the same character unchanged.
- A move (no character id) opens a new span only when the matrix, color
  transform, blend mode or filter list actually changes.
- RemoveObject closes the span and leaves the depth empty.
- Frames are completed only by ShowFrame. Commands after the final
  ShowFrame do not add a frame, and a span that never reaches a ShowFrame
  (duration 0) is dropped since it was never displayed.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import AbstractSet, Any, Iterable, Mapping, NamedTuple, Optional

from vectoranim.commands import Command, FrameLabel, PlaceObject, RemoveObject, ShowFrame
from vectoranim.exceptions import MalformedStreamError
from vectoranim.model import Animation, BlendMode, ColorTransform, FrameSpan, Matrix

logger = logging.getLogger(__name__)


class Label(NamedTuple):
    """A frame label occurrence."""
    frame: int
    name: str


@dataclass(frozen=True)
class LiveObject:
    """What currently occupies a depth, and since when.

    Filters count as part of the appearance: a move that only changes the
    filter list starts a new span so no filter state is lost.
    """
    character_id: int
    start_frame: int
    matrix: Matrix = field(default_factory=Matrix)
    color_transform: ColorTransform = field(default_factory=ColorTransform)
    blend_mode: str = BlendMode.NORMAL.value
    filters: tuple[dict[str, Any], ...] = ()

    def updated(self, command: PlaceObject) -> 'LiveObject':
        """Apply the fields a PlaceObject supplies; omitted fields are inherited."""
        changes: dict[str, Any] = {}
        if command.character_id is not None:
            changes['character_id'] = command.character_id
        if command.matrix is not None:
            changes['matrix'] = command.matrix
        if command.color_transform is not None:
            changes['color_transform'] = command.color_transform
        if command.blend_mode is not None:
            changes['blend_mode'] = BlendMode(command.blend_mode).value
        if command.filters is not None:
            changes['filters'] = tuple(command.filters)
        return replace(self, **changes) if changes else self

    def same_appearance(self, other: 'LiveObject') -> bool:
        return (
            self.character_id == other.character_id
            and self.matrix == other.matrix
            and self.color_transform == other.color_transform
            and self.blend_mode == other.blend_mode
            and self.filters == other.filters
        )

    def to_span(self, end_frame: int) -> Optional[FrameSpan]:
        """Close this object at ``end_frame``; None if it was never shown."""
        duration = end_frame - self.start_frame
        if duration < 1:
            return None
        return FrameSpan(
            character_id=self.character_id,
            place_frame=self.start_frame,
            duration=duration,
            matrix=self.matrix,
            color_transform=self.color_transform,
            blend_mode=self.blend_mode,
            filters=[dict(f) for f in self.filters],
        )


@dataclass(frozen=True)
class TimelineState:
    """Accumulator of the timeline fold."""
    current_frame: int = 0
    live: Mapping[int, LiveObject] = field(default_factory=dict)
    labels: tuple[Label, ...] = ()


# Spans closed by one step, as (depth, span) pairs
Closed = list[tuple[int, FrameSpan]]


@dataclass(frozen=True)
class Timeline:
    """Result of building one command stream."""
    time_lines: dict[int, list[FrameSpan]]
    total_frames: int
    labels: tuple[Label, ...] = ()

    def to_animation(self) -> Animation:
        return Animation(time_lines=self.time_lines, total_frames=self.total_frames)


def _close(depth: int, live: Optional[LiveObject], frame: int) -> Closed:
    if live is None:
        return []
    span = live.to_span(frame)
    if span is None:
        logger.debug(
            "Dropping zero-length span of character %d at depth %d, frame %d",
            live.character_id, depth, frame,
        )
        return []
    return [(depth, span)]


def _place(
    state: TimelineState,
    command: PlaceObject,
    known_ids: Optional[AbstractSet[int]],
) -> tuple[TimelineState, Closed]:
    depth = command.depth
    frame = state.current_frame
    live = state.live.get(depth)

    if command.is_move:
        if live is None:
            raise MalformedStreamError("Move targets an empty depth", depth=depth, frame=frame)
    elif known_ids is not None and command.character_id not in known_ids:
        raise MalformedStreamError(
            "PlaceObject references an undefined character",
            character_id=command.character_id, depth=depth, frame=frame,
        )

    if live is None:
        placed = LiveObject(character_id=command.character_id, start_frame=frame).updated(command)
        return replace(state, live={**state.live, depth: placed}), []

    # Replacing keeps the transforms of the previous occupant unless supplied
    placed = live.updated(command)
    if command.is_move and placed.same_appearance(live):
        return state, []
    placed = replace(placed, start_frame=frame)
    return replace(state, live={**state.live, depth: placed}), _close(depth, live, frame)


def _remove(state: TimelineState, command: RemoveObject) -> tuple[TimelineState, Closed]:
    live = state.live.get(command.depth)
    if live is None:
        raise MalformedStreamError(
            "RemoveObject targets an empty depth", depth=command.depth, frame=state.current_frame
        )
    remaining = {d: obj for d, obj in state.live.items() if d != command.depth}
    return replace(state, live=remaining), _close(command.depth, live, state.current_frame)


def step(
    state: TimelineState,
    command: Command,
    known_ids: Optional[AbstractSet[int]] = None,
) -> tuple[TimelineState, Closed]:
    """
    Apply one command to the fold state.

    Args:
        state: Current state
        command: Command to apply
        known_ids: Defined character ids; if given, placing any other id fails

    Returns:
        (next state, spans closed by this command)

    Raises:
        MalformedStreamError: On undefined ids or moves/removals on empty depths
    """
    if isinstance(command, PlaceObject):
        return _place(state, command, known_ids)
    if isinstance(command, RemoveObject):
        return _remove(state, command)
    if isinstance(command, ShowFrame):
        return replace(state, current_frame=state.current_frame + 1), []
    if isinstance(command, FrameLabel):
        return replace(state, labels=state.labels + (Label(state.current_frame, command.name),)), []
    # Definitions carry no timeline state
    return state, []


def finish(state: TimelineState) -> tuple[TimelineState, Closed]:
    """Close every span still live at the end of the stream."""
    closed: Closed = []
    for depth in sorted(state.live):
        closed.extend(_close(depth, state.live[depth], state.current_frame))
    return replace(state, live={}), closed


def build_timeline(
    commands: Iterable[Command],
    known_ids: Optional[AbstractSet[int]] = None,
) -> Timeline:
    """
    Build the span timeline of one command stream.

    Args:
        commands: Root or sprite command stream
        known_ids: Defined character ids, used to reject undefined references

    Returns:
        Timeline with depth-sorted spans, frame count and labels
    """
    state = TimelineState()
    time_lines: dict[int, list[FrameSpan]] = {}
    for command in commands:
        state, closed = step(state, command, known_ids)
        for depth, span in closed:
            time_lines.setdefault(depth, []).append(span)
    state, closed = finish(state)
    for depth, span in closed:
        time_lines.setdefault(depth, []).append(span)

    return Timeline(
        time_lines=dict(sorted(time_lines.items())),
        total_frames=state.current_frame,
        labels=state.labels,
    )
