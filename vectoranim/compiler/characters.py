"""
Character table: every shape and sprite defined in a movie, keyed by id.

Shapes are leaf assets; only their id matters here. Sprites keep their nested
command stream verbatim so the resolver can compile them later.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional

from vectoranim.commands import Command, DefineShape, DefineSprite, iter_definitions
from vectoranim.exceptions import DuplicateCharacterIdError, MalformedStreamError

logger = logging.getLogger(__name__)


class CharacterKind(str, Enum):
    """Character kinds the compiler distinguishes."""
    SHAPE = "shape"
    SPRITE = "sprite"


@dataclass(frozen=True)
class Character:
    """A reusable asset definition."""
    id: int
    kind: CharacterKind
    commands: tuple[Command, ...] = ()  # Sprites only
    frame_count: Optional[int] = None  # Declared by the container, sprites only

    @property
    def is_sprite(self) -> bool:
        return self.kind == CharacterKind.SPRITE


@dataclass
class CharacterTable:
    """Mapping from character id to its definition."""
    characters: dict[int, Character] = field(default_factory=dict)

    def add(self, character: Character) -> None:
        if character.id in self.characters:
            raise DuplicateCharacterIdError(
                "Character defined more than once", character_id=character.id
            )
        self.characters[character.id] = character

    def get(self, character_id: int) -> Optional[Character]:
        return self.characters.get(character_id)

    def require(self, character_id: int) -> Character:
        """
        Get a character that must exist.

        Raises:
            MalformedStreamError: If the id was never defined
        """
        character = self.characters.get(character_id)
        if character is None:
            raise MalformedStreamError("Undefined character", character_id=character_id)
        return character

    def ids(self) -> frozenset[int]:
        return frozenset(self.characters)

    def sprites(self) -> Iterator[Character]:
        """Yield sprite characters in ascending id order."""
        for character_id in sorted(self.characters):
            character = self.characters[character_id]
            if character.is_sprite:
                yield character

    def shapes(self) -> Iterator[Character]:
        """Yield shape characters in ascending id order."""
        for character_id in sorted(self.characters):
            character = self.characters[character_id]
            if not character.is_sprite:
                yield character

    def __contains__(self, character_id: object) -> bool:
        return character_id in self.characters

    def __len__(self) -> int:
        return len(self.characters)


def classify(commands: Iterable[Command]) -> CharacterTable:
    """
    Build the character table from a command stream.

    Walks every definition once, including definitions nested inside sprite
    streams.

    Args:
        commands: Root command stream

    Returns:
        CharacterTable with one entry per defined id

    Raises:
        DuplicateCharacterIdError: If an id is defined twice
    """
    table = CharacterTable()
    for definition in iter_definitions(commands):
        if isinstance(definition, DefineSprite):
            table.add(Character(
                id=definition.character_id,
                kind=CharacterKind.SPRITE,
                commands=definition.commands,
                frame_count=definition.frame_count,
            ))
        elif isinstance(definition, DefineShape):
            table.add(Character(id=definition.character_id, kind=CharacterKind.SHAPE))
    logger.debug(
        "Classified %d characters (%d sprites)",
        len(table), sum(1 for _ in table.sprites()),
    )
    return table
