"""
Tests for the timeline builder.

Covers the fold step by step, the span coalescing rules and the frame
boundary convention (frames are completed only by ShowFrame).
"""

import pytest

from vectoranim.commands import (
    DefineShape,
    FrameLabel,
    PlaceObject,
    RemoveObject,
    ShowFrame,
)
from vectoranim.compiler import Label, TimelineState, build_timeline, finish, step
from vectoranim.exceptions import MalformedStreamError
from vectoranim.model import BlendMode, ColorTransform, Matrix


def assert_span_invariants(time_lines, total_frames):
    """Spans are >= 1 frame, ascending, non-overlapping and inside the timeline."""
    for depth, spans in time_lines.items():
        previous_end = 0
        for span in spans:
            assert span.duration >= 1, f"depth {depth}"
            assert span.place_frame >= previous_end, f"depth {depth} overlaps"
            previous_end = span.end_frame
        assert previous_end <= total_frames


class TestBasicStreams:
    """Small end-to-end streams."""

    def test_place_show_show_remove(self):
        """One placement shown for two frames gives one two-frame span."""
        timeline = build_timeline([
            PlaceObject(depth=2, character_id=1, matrix=Matrix()),
            ShowFrame(),
            ShowFrame(),
            RemoveObject(depth=2),
        ])
        assert list(timeline.time_lines) == [2]
        [span] = timeline.time_lines[2]
        assert span.character_id == 1
        assert span.place_frame == 0
        assert span.duration == 2
        assert timeline.total_frames == 2

    def test_move_between_frames_splits_span(self, rotated_matrix):
        """A transform change after the first frame yields two one-frame spans."""
        timeline = build_timeline([
            PlaceObject(depth=2, character_id=1, matrix=Matrix()),
            ShowFrame(),
            PlaceObject(depth=2, character_id=1, matrix=rotated_matrix),
            ShowFrame(),
            RemoveObject(depth=2),
        ])
        first, second = timeline.time_lines[2]
        assert (first.place_frame, first.duration) == (0, 1)
        assert (second.place_frame, second.duration) == (1, 1)
        assert first.matrix == Matrix()
        assert second.matrix == rotated_matrix

    def test_empty_stream(self):
        """An empty stream has no frames and no timelines."""
        timeline = build_timeline([])
        assert timeline.total_frames == 0
        assert timeline.time_lines == {}
        assert timeline.labels == ()


class TestSpanCoalescing:
    """Tests for when spans start and end."""

    def test_unchanged_move_extends_span(self):
        """Moves that change nothing do not open new spans."""
        timeline = build_timeline([
            PlaceObject(depth=1, character_id=1, matrix=Matrix(tx=5)),
            ShowFrame(),
            PlaceObject(depth=1, matrix=Matrix(tx=5)),
            ShowFrame(),
            PlaceObject(depth=1, blend_mode=BlendMode.NORMAL),
            ShowFrame(),
        ])
        [span] = timeline.time_lines[1]
        assert span.duration == 3

    def test_replacing_same_character_starts_new_span(self):
        """Re-placing the same character opens a new span even if nothing changed."""
        timeline = build_timeline([
            PlaceObject(depth=1, character_id=1, matrix=Matrix(tx=5)),
            ShowFrame(),
            PlaceObject(depth=1, character_id=1),
            ShowFrame(),
        ])
        first, second = timeline.time_lines[1]
        assert (first.place_frame, first.duration) == (0, 1)
        assert (second.place_frame, second.duration) == (1, 1)
        assert second.character_id == 1
        # Omitted fields carry over from the previous placement
        assert second.matrix == Matrix(tx=5)

    def test_step_replace_same_character_closes_span(self):
        """step() returns the closed span when the same character is placed again."""
        state, _ = step(TimelineState(), PlaceObject(depth=2, character_id=7))
        state, _ = step(state, ShowFrame())
        state, closed = step(state, PlaceObject(depth=2, character_id=7))
        [(depth, span)] = closed
        assert (depth, span.place_frame, span.duration) == (2, 0, 1)
        assert state.live[2].start_frame == 1

    def test_move_inherits_omitted_fields(self):
        """A move only supplying a color keeps the previous matrix and blend mode."""
        fade = ColorTransform(mult_color=(1, 1, 1, 0.5))
        timeline = build_timeline([
            PlaceObject(depth=1, character_id=1, matrix=Matrix(tx=5), blend_mode=BlendMode.ADD),
            ShowFrame(),
            PlaceObject(depth=1, color_transform=fade),
            ShowFrame(),
        ])
        first, second = timeline.time_lines[1]
        assert second.matrix == Matrix(tx=5)
        assert second.blend_mode == 'Add'
        assert second.color_transform == fade
        assert first.color_transform == ColorTransform()

    def test_blend_mode_change_splits(self):
        """Blend mode changes start a new span."""
        timeline = build_timeline([
            PlaceObject(depth=1, character_id=1),
            ShowFrame(),
            PlaceObject(depth=1, blend_mode=BlendMode.MULTIPLY),
            ShowFrame(),
        ])
        assert [s.blend_mode for s in timeline.time_lines[1]] == ['Normal', 'Multiply']

    def test_filter_change_splits_and_passes_through(self):
        """Filters are kept verbatim and a changed list starts a new span."""
        blur = {'type': 'BlurFilter', 'blur_x': 4.0, 'blur_y': 4.0, 'passes': 1}
        timeline = build_timeline([
            PlaceObject(depth=1, character_id=1),
            ShowFrame(),
            PlaceObject(depth=1, filters=[blur]),
            ShowFrame(),
        ])
        first, second = timeline.time_lines[1]
        assert first.filters == []
        assert second.filters == [blur]

    def test_different_character_replaces(self):
        """Placing another character on an occupied depth starts a new span."""
        timeline = build_timeline([
            PlaceObject(depth=1, character_id=1, matrix=Matrix(tx=7)),
            ShowFrame(),
            PlaceObject(depth=1, character_id=2),
            ShowFrame(),
        ])
        first, second = timeline.time_lines[1]
        assert (first.character_id, first.duration) == (1, 1)
        assert (second.character_id, second.place_frame, second.duration) == (2, 1, 1)
        # The replacement keeps the transform it did not override
        assert second.matrix == Matrix(tx=7)

    def test_remove_leaves_gap(self):
        """A removed depth stays empty until it is placed again."""
        timeline = build_timeline([
            PlaceObject(depth=1, character_id=1),
            ShowFrame(),
            RemoveObject(depth=1),
            ShowFrame(),
            ShowFrame(),
            PlaceObject(depth=1, character_id=1),
            ShowFrame(),
        ])
        spans = timeline.time_lines[1]
        assert [(s.place_frame, s.duration) for s in spans] == [(0, 1), (3, 1)]
        # Placed fresh after removal: transforms start from identity
        assert spans[1].matrix == Matrix()

    def test_same_frame_changes_collapse(self):
        """Only the state showing when the frame completes produces a span."""
        timeline = build_timeline([
            PlaceObject(depth=1, character_id=1, matrix=Matrix(tx=1)),
            PlaceObject(depth=1, matrix=Matrix(tx=2)),
            PlaceObject(depth=1, character_id=3),
            ShowFrame(),
        ])
        [span] = timeline.time_lines[1]
        assert span.character_id == 3
        assert span.matrix == Matrix(tx=2)
        assert (span.place_frame, span.duration) == (0, 1)

    def test_depths_sorted_ascending(self):
        """Depth keys come out in render order."""
        timeline = build_timeline([
            PlaceObject(depth=9, character_id=1),
            PlaceObject(depth=2, character_id=1),
            PlaceObject(depth=5, character_id=1),
            ShowFrame(),
        ])
        assert list(timeline.time_lines) == [2, 5, 9]


class TestFrameBoundaries:
    """Tests for the ShowFrame-completes-a-frame convention."""

    def test_spans_end_at_stream_end(self):
        """Objects never removed run until the last frame."""
        timeline = build_timeline([
            PlaceObject(depth=1, character_id=1),
            ShowFrame(),
            ShowFrame(),
            ShowFrame(),
        ])
        [span] = timeline.time_lines[1]
        assert span.duration == 3
        assert timeline.total_frames == 3

    def test_trailing_partial_frame_not_counted(self):
        """Commands after the last ShowFrame add no frame and no span."""
        timeline = build_timeline([
            PlaceObject(depth=1, character_id=1),
            ShowFrame(),
            PlaceObject(depth=2, character_id=1),
            PlaceObject(depth=1, matrix=Matrix(tx=9)),
        ])
        assert timeline.total_frames == 1
        assert list(timeline.time_lines) == [1]
        [span] = timeline.time_lines[1]
        assert span.matrix == Matrix()
        assert span.duration == 1

    def test_no_show_frame_at_all(self):
        """A stream without ShowFrame has zero frames."""
        timeline = build_timeline([PlaceObject(depth=1, character_id=1)])
        assert timeline.total_frames == 0
        assert timeline.time_lines == {}

    def test_invariants_on_busy_stream(self):
        """A mixed stream keeps every span invariant."""
        commands = []
        for frame in range(30):
            if frame % 7 == 0:
                commands.append(PlaceObject(depth=frame % 3, character_id=frame % 4 + 1))
            else:
                commands.append(PlaceObject(depth=frame % 3, character_id=1, matrix=Matrix(tx=frame // 2)))
            commands.append(ShowFrame())
            if frame % 11 == 10:
                commands.append(RemoveObject(depth=frame % 3))
        timeline = build_timeline(commands)
        assert timeline.total_frames == 30
        assert_span_invariants(timeline.time_lines, timeline.total_frames)

    def test_deterministic(self, walk_cycle):
        """Building the same stream twice gives identical spans."""
        first = build_timeline(walk_cycle).to_animation().model_dump_json()
        second = build_timeline(walk_cycle).to_animation().model_dump_json()
        assert first == second


class TestLabels:
    """Tests for label collection."""

    def test_labels_recorded_with_frame(self):
        """Labels record the frame they were declared on."""
        timeline = build_timeline([
            FrameLabel(name='idle'),
            ShowFrame(),
            ShowFrame(),
            FrameLabel(name='run'),
            ShowFrame(),
        ])
        assert timeline.labels == (Label(0, 'idle'), Label(2, 'run'))

    def test_definitions_are_ignored(self):
        """Definition commands do not touch timeline state."""
        state = TimelineState()
        new_state, closed = step(state, DefineShape(character_id=1))
        assert new_state is state
        assert closed == []


class TestStep:
    """Tests for the pure fold step."""

    def test_step_does_not_mutate_state(self):
        """step() returns a new state and leaves the old one untouched."""
        state = TimelineState()
        placed, closed = step(state, PlaceObject(depth=1, character_id=1))
        assert state.live == {}
        assert 1 in placed.live
        assert closed == []

        shown, _ = step(placed, ShowFrame())
        assert shown.current_frame == 1
        assert placed.current_frame == 0

    def test_step_returns_closed_span(self):
        """Removing a depth returns the closed span."""
        state, _ = step(TimelineState(), PlaceObject(depth=4, character_id=2))
        state, _ = step(state, ShowFrame())
        state, closed = step(state, RemoveObject(depth=4))
        [(depth, span)] = closed
        assert depth == 4
        assert (span.character_id, span.duration) == (2, 1)
        assert state.live == {}

    def test_finish_closes_live_depths(self):
        """finish() closes every live depth in depth order."""
        state = TimelineState()
        for command in (
            PlaceObject(depth=3, character_id=1),
            PlaceObject(depth=1, character_id=1),
            ShowFrame(),
        ):
            state, _ = step(state, command)
        state, closed = finish(state)
        assert [depth for depth, _ in closed] == [1, 3]
        assert state.live == {}


class TestMalformedStreams:
    """Tests for fatal stream errors."""

    def test_remove_empty_depth(self):
        """Removing from an empty depth reports depth and frame."""
        with pytest.raises(MalformedStreamError) as exc_info:
            build_timeline([ShowFrame(), RemoveObject(depth=6)])
        assert exc_info.value.depth == 6
        assert exc_info.value.frame == 1

    def test_move_empty_depth(self):
        """Moving an empty depth is malformed."""
        with pytest.raises(MalformedStreamError):
            build_timeline([PlaceObject(depth=1, matrix=Matrix(tx=1))])

    def test_undefined_character(self):
        """With known ids, placing an undefined character fails."""
        with pytest.raises(MalformedStreamError) as exc_info:
            build_timeline([PlaceObject(depth=1, character_id=42)], known_ids={1, 2})
        assert exc_info.value.character_id == 42
        assert exc_info.value.depth == 1

    def test_known_ids_optional(self):
        """Without known ids any character id is accepted."""
        timeline = build_timeline([PlaceObject(depth=1, character_id=42), ShowFrame()])
        assert timeline.time_lines[1][0].character_id == 42
