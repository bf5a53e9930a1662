"""
Sub-animation resolver: compiles every sprite character exactly once.

Sprites keep their matrices in local space; composing a nested sprite with
its parent placement is left to the renderer.

Before anything is built, the sprite reference graph (sprites placing other
sprites) is walked with an explicit stack so a self-referential definition is
rejected instead of looping.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, Optional

from vectoranim.commands import Command, PlaceObject
from vectoranim.exceptions import MalformedStreamError
from vectoranim.model import Animation, Matrix

from .characters import Character, CharacterTable
from .timeline import Timeline, build_timeline

logger = logging.getLogger(__name__)


def _placed_ids(commands: tuple[Command, ...]) -> Iterator[int]:
    """Character ids placed by a stream, nested definitions excluded."""
    for command in commands:
        if isinstance(command, PlaceObject) and command.character_id is not None:
            yield command.character_id


def check_sprite_graph(table: CharacterTable) -> None:
    """
    Verify that no sprite (directly or indirectly) places itself.

    Raises:
        MalformedStreamError: On a reference cycle
    """
    done: set[int] = set()
    for root in table.sprites():
        if root.id in done:
            continue
        visiting = {root.id}
        # Each entry: (sprite id, iterator over sprite children still to visit)
        stack = [(root.id, _sprite_children(table, root))]
        while stack:
            sprite_id, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                visiting.discard(sprite_id)
                done.add(sprite_id)
                continue
            if child.id in visiting:
                raise MalformedStreamError(
                    f"Sprite reference cycle through sprite {sprite_id}",
                    character_id=child.id,
                )
            if child.id not in done:
                visiting.add(child.id)
                stack.append((child.id, _sprite_children(table, child)))


def _sprite_children(table: CharacterTable, sprite: Character) -> Iterator[Character]:
    for character_id in _placed_ids(sprite.commands):
        child = table.get(character_id)
        if child is not None and child.is_sprite:
            yield child


class SubAnimationResolver:
    """
    Builds and caches one Animation per sprite character.

    The cache is write-once per id: ``get()`` on an already built sprite
    returns the stored result without rebuilding it.
    """

    def __init__(self, table: CharacterTable):
        self.table = table
        self._known_ids = table.ids()
        self._cache: dict[int, Animation] = {}
        self.build_count = 0

    def _build(self, sprite: Character) -> Animation:
        timeline: Timeline = build_timeline(sprite.commands, self._known_ids)
        if sprite.frame_count is not None and sprite.frame_count != timeline.total_frames:
            logger.warning(
                "Sprite %d declares %d frames but its stream shows %d",
                sprite.id, sprite.frame_count, timeline.total_frames,
            )
        logger.debug(
            "Built sprite %d: %d frames, %d depths",
            sprite.id, timeline.total_frames, len(timeline.time_lines),
        )
        return timeline.to_animation()

    def get(self, character_id: int) -> Animation:
        """
        Get the compiled animation of a sprite, building it on first use.

        Raises:
            MalformedStreamError: If the id is undefined or not a sprite
        """
        cached = self._cache.get(character_id)
        if cached is not None:
            return cached
        sprite = self.table.require(character_id)
        if not sprite.is_sprite:
            raise MalformedStreamError("Character is not a sprite", character_id=character_id)
        animation = self._build(sprite)
        self.build_count += 1
        self._cache[character_id] = animation
        return animation

    def resolve_all(self, workers: int = 1) -> dict[int, Animation]:
        """
        Build every sprite of the table.

        Args:
            workers: Number of threads; 1 builds sequentially. Each sprite id
                is assigned to exactly one task before any work starts.

        Returns:
            Mapping sprite id -> Animation in ascending id order
        """
        check_sprite_graph(self.table)
        pending = [s for s in self.table.sprites() if s.id not in self._cache]

        if workers > 1 and len(pending) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                built = list(executor.map(self._build, pending))
            for sprite, animation in zip(pending, built):
                self._cache[sprite.id] = animation
                self.build_count += 1
        else:
            for sprite in pending:
                self.get(sprite.id)

        return {sprite.id: self._cache[sprite.id] for sprite in self.table.sprites()}


def resolve(table: CharacterTable, workers: int = 1) -> dict[int, Animation]:
    """
    Compile every sprite of a character table into its sub-animation.

    Args:
        table: Classified characters
        workers: Thread count for building independent sprites

    Returns:
        Mapping sprite id -> Animation (the document's base_animations)
    """
    return SubAnimationResolver(table).resolve_all(workers=workers)


def flatten_root_transform(animation: Animation, root_matrix: Optional[Matrix]) -> Animation:
    """
    Pre-multiply the root clip's placement matrix into every top-level span.

    Args:
        animation: Root timeline as an Animation
        root_matrix: Placement of the root clip; None or identity is a no-op

    Returns:
        Animation with world-space top-level matrices
    """
    if root_matrix is None or root_matrix.is_identity():
        return animation
    return animation.map_spans(
        lambda span: span.model_copy(update={'matrix': root_matrix @ span.matrix})
    )
