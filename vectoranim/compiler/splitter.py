"""Root animation splitter: carves the root timeline into named animations."""

import logging
from typing import Iterable

from vectoranim.model import Animation, FrameSpan

from .timeline import Label

logger = logging.getLogger(__name__)

DEFAULT_ANIMATION = "default"


def label_intervals(labels: Iterable[tuple[int, str]], total_frames: int) -> list[tuple[str, int, int]]:
    """
    Turn label occurrences into half-open frame intervals.

    Labels are ordered by frame (ties keep declaration order). Each label runs
    until the next label's frame, the last one until ``total_frames``. A label
    name seen again later is ignored as a boundary, so its frames stay with
    the preceding animation.

    Args:
        labels: Label occurrences in declaration order
        total_frames: Frame count of the root timeline

    Returns:
        List of (name, start, end) in frame order
    """
    ordered: list[Label] = []
    seen: set[str] = set()
    for label in sorted((Label(*item) for item in labels), key=lambda item: item.frame):
        if label.name in seen:
            logger.warning("Ignoring repeated label %r at frame %d", label.name, label.frame)
            continue
        seen.add(label.name)
        ordered.append(label)

    intervals = []
    for index, label in enumerate(ordered):
        end = ordered[index + 1].frame if index + 1 < len(ordered) else total_frames
        start = min(label.frame, total_frames)
        intervals.append((label.name, start, max(start, min(end, total_frames))))
    return intervals


def split(
    time_lines: dict[int, list[FrameSpan]],
    labels: Iterable[tuple[int, str]],
    total_frames: int,
) -> dict[str, Animation]:
    """
    Partition the root timeline into named animations.

    Without labels the whole timeline becomes the "default" animation with
    its numbering unchanged. Otherwise frames before the first label are
    dropped and every label gets its own renumbered slice.

    Args:
        time_lines: Root spans per depth
        labels: Label occurrences from the root stream
        total_frames: Frame count of the root timeline

    Returns:
        Mapping name -> Animation, in frame order
    """
    root = Animation(time_lines=time_lines, total_frames=total_frames)
    labels = list(labels)
    if not labels:
        return {DEFAULT_ANIMATION: root}

    animations: dict[str, Animation] = {}
    for name, start, end in label_intervals(labels, root.total_frames):
        animations[name] = root.slice(start, end)
        logger.debug("Animation %r: frames %d-%d", name, start, end)
    return animations
