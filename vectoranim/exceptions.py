"""Exception classes for the timeline compiler."""

from typing import Optional


class AnimationCompileError(Exception):
    """Base exception for compile errors.

    Carries the location of the offending command so callers can report it.
    """

    def __init__(
        self,
        message: str,
        *,
        depth: Optional[int] = None,
        frame: Optional[int] = None,
        character_id: Optional[int] = None,
    ):
        self.depth = depth
        self.frame = frame
        self.character_id = character_id
        context = []
        if character_id is not None:
            context.append(f"character_id={character_id}")
        if depth is not None:
            context.append(f"depth={depth}")
        if frame is not None:
            context.append(f"frame={frame}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)


class MalformedStreamError(AnimationCompileError):
    """Raised when a command references an undefined character, touches an
    empty depth, or sprites reference each other in a cycle."""

    pass


class DuplicateCharacterIdError(AnimationCompileError):
    """Raised when the same character id is defined twice."""

    pass
