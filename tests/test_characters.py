"""
Tests for the character table.
"""

import pytest

from vectoranim.commands import DefineShape, DefineSprite, PlaceObject, ShowFrame
from vectoranim.compiler import CharacterKind, CharacterTable, classify
from vectoranim.exceptions import DuplicateCharacterIdError, MalformedStreamError


class TestClassify:
    """Tests for classify()."""

    def test_shapes_and_sprites(self):
        """Shapes and sprites are told apart and sprites keep their streams."""
        sprite_commands = (PlaceObject(depth=1, character_id=1), ShowFrame())
        table = classify((
            DefineShape(character_id=1),
            DefineSprite(character_id=2, frame_count=1, commands=sprite_commands),
        ))

        assert len(table) == 2
        assert table.require(1).kind == CharacterKind.SHAPE
        sprite = table.require(2)
        assert sprite.is_sprite
        assert sprite.commands == sprite_commands
        assert sprite.frame_count == 1

    def test_nested_definitions_are_collected(self):
        """Definitions inside sprite streams land in the same table."""
        table = classify((
            DefineSprite(character_id=10, commands=(
                DefineShape(character_id=11),
                DefineSprite(character_id=12),
            )),
        ))
        assert table.ids() == frozenset({10, 11, 12})
        assert [s.id for s in table.sprites()] == [10, 12]
        assert [s.id for s in table.shapes()] == [11]

    def test_non_definitions_are_ignored(self):
        """Timeline commands do not create characters."""
        table = classify((PlaceObject(depth=1, character_id=1), ShowFrame()))
        assert len(table) == 0

    def test_duplicate_id(self):
        """Defining an id twice is fatal."""
        with pytest.raises(DuplicateCharacterIdError) as exc_info:
            classify((DefineShape(character_id=4), DefineSprite(character_id=4)))
        assert exc_info.value.character_id == 4
        assert 'character_id=4' in str(exc_info.value)

    def test_duplicate_id_nested(self):
        """Duplicates are found across nesting levels too."""
        with pytest.raises(DuplicateCharacterIdError):
            classify((
                DefineShape(character_id=4),
                DefineSprite(character_id=5, commands=(DefineShape(character_id=4),)),
            ))


class TestCharacterTable:
    """Tests for table lookups."""

    def test_require_unknown_id(self):
        """require() raises MalformedStreamError for unknown ids."""
        table = CharacterTable()
        with pytest.raises(MalformedStreamError) as exc_info:
            table.require(99)
        assert exc_info.value.character_id == 99

    def test_get_and_contains(self):
        """get() returns None for unknown ids; membership works on ids."""
        table = classify((DefineShape(character_id=1),))
        assert 1 in table
        assert 2 not in table
        assert table.get(2) is None
