"""
Compiled animation models.

Serializes to the JSON format consumed by renderers:

    Animation:
    {
        "time_lines": {"<depth>": [FrameSpan, ...]},
        "total_frames": 40
    }

    FrameSpan:
    {
        "id": 3,
        "place_frame": 0,
        "duration": 2,
        "matrix": {"a": 1.0, "b": 0.0, "c": 0.0, "d": 1.0, "tx": 0.0, "ty": 0.0},
        "color_transform": {"mult_color": [1, 1, 1, 1], "add_color": [0, 0, 0, 0]},
        "blend_mode": "Normal",
        "filters": []
    }

Depth keys are always kept in ascending order (lower depth renders first).
"""

from typing import Any, Callable, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field

from .transform import BlendMode, ColorTransform, Matrix


class FrameSpan(BaseModel):
    """A run of consecutive frames during which one depth shows an unchanged object."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra='ignore',
        use_enum_values=True,
    )

    # Serializes as "id" to match the renderer format
    character_id: int = Field(alias='id', ge=0)
    place_frame: int = Field(default=0, ge=0)
    duration: int = Field(default=1, ge=1)
    matrix: Matrix = Field(default_factory=Matrix)
    color_transform: ColorTransform = Field(default_factory=ColorTransform)
    blend_mode: BlendMode = Field(default=BlendMode.NORMAL)
    # Opaque, uninterpreted filter records in source order
    filters: list[dict[str, Any]] = Field(default_factory=list)

    @property
    def end_frame(self) -> int:
        """First frame after this span (exclusive end)."""
        return self.place_frame + self.duration

    def clip(self, start: int, end: int) -> Optional['FrameSpan']:
        """
        Clip this span to the half-open frame interval [start, end).

        The clipped span keeps its transforms and is renumbered so that
        ``start`` maps to frame 0.

        Args:
            start: First frame of the interval
            end: Exclusive end of the interval

        Returns:
            Clipped span, or None if the span lies outside the interval
        """
        first = max(self.place_frame, start)
        last = min(self.end_frame, end)
        if last <= first:
            return None
        return self.model_copy(update={'place_frame': first - start, 'duration': last - first})


class Animation(BaseModel):
    """Per-depth span timeline plus its frame count.

    Used both for sprite sub-animations and for named root animations.
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    time_lines: dict[int, list[FrameSpan]] = Field(default_factory=dict)
    total_frames: int = Field(default=0, ge=0)

    def model_post_init(self, __context: Any) -> None:
        """Keep depths in ascending render order."""
        if list(self.time_lines) != sorted(self.time_lines):
            self.time_lines = dict(sorted(self.time_lines.items()))

    def depths(self) -> list[int]:
        return list(self.time_lines)

    def iter_spans(self) -> Iterator[tuple[int, FrameSpan]]:
        """Yield (depth, span) pairs in depth order, then frame order."""
        for depth, spans in self.time_lines.items():
            for span in spans:
                yield depth, span

    def span_count(self) -> int:
        return sum(len(spans) for spans in self.time_lines.values())

    def map_spans(self, fn: Callable[[FrameSpan], FrameSpan]) -> 'Animation':
        """Return a new animation with ``fn`` applied to every span."""
        return Animation(
            time_lines={
                depth: [fn(span) for span in spans]
                for depth, spans in self.time_lines.items()
            },
            total_frames=self.total_frames,
        )

    def slice(self, start: int, end: int) -> 'Animation':
        """
        Cut the frame interval [start, end) out of this animation.

        Spans straddling a boundary are truncated, frames are renumbered from
        0, and depths with nothing visible inside the interval are dropped.
        """
        time_lines: dict[int, list[FrameSpan]] = {}
        for depth, spans in self.time_lines.items():
            clipped = [c for c in (span.clip(start, end) for span in spans) if c is not None]
            if clipped:
                time_lines[depth] = clipped
        return Animation(time_lines=time_lines, total_frames=max(0, end - start))
