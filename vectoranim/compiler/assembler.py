"""Animation document assembler: global scale pass and final composition."""

from typing import Mapping

from vectoranim.formats.document import AnimationDocument
from vectoranim.model import Animation, FrameSpan


def scale_span(span: FrameSpan, scale: float, use_root_transform: bool = False) -> FrameSpan:
    """
    Apply the global output scale to one span.

    Translation is always scaled. The linear part (a, b, c, d) is scaled too
    unless the root transform already carries the placement scale.
    """
    matrix = span.matrix.scaled(scale, translation_only=use_root_transform)
    return span.model_copy(update={'matrix': matrix})


def scale_animation(animation: Animation, scale: float, use_root_transform: bool = False) -> Animation:
    if scale == 1.0:
        return animation
    return animation.map_spans(lambda span: scale_span(span, scale, use_root_transform))


def assemble(
    name: str,
    frame_rate: float,
    base_animations: Mapping[int, Animation],
    animations: Mapping[str, Animation],
    scale: float = 1.0,
    use_root_transform: bool = False,
) -> AnimationDocument:
    """
    Compose the final document.

    The scale pass runs uniformly over every span of every animation after
    all timelines are built.

    Args:
        name: Document name
        frame_rate: Frames per second of the source movie
        base_animations: Sprite id -> sub-animation
        animations: Label name -> named animation
        scale: Global output scale factor
        use_root_transform: Restrict scaling to translations

    Returns:
        AnimationDocument
    """
    return AnimationDocument(
        name=name,
        frame_rate=frame_rate,
        base_animations={
            character_id: scale_animation(animation, scale, use_root_transform)
            for character_id, animation in sorted(base_animations.items())
        },
        animations={
            label: scale_animation(animation, scale, use_root_transform)
            for label, animation in animations.items()
        },
    )
